import random

import pytest

from imapcore.imapnum import (
    BadNumSetError,
    NumberSet,
    NumRange,
    parse_num_range,
    parse_set,
)

MAX = 0xFFFFFFFF


def check_num_set(s):
    ranges = list(s)
    n = len(ranges)
    for i, v in enumerate(ranges):
        if v.start == 0:
            assert v.stop == 0, f'{s}: "*:n" range at {i}'
            assert i == n - 1, f'{s}: "*" not at the end'
            continue
        if i > 0:
            assert ranges[i - 1].stop < v.start - 1, f"{s}: overlap at {i}"
        if v.stop < v.start:
            assert v.stop == 0, f"{s}: reversed range at {i}"
            assert i == n - 1, f'{s}: "n:*" not at the end'


INVALID_RANGES = [
    "", " ", "A", "0", " 1", "1 ", "*1", "1*", "-1", "01", "0x1", "1 2", "1,2",
    "1.2", "4294967296",
    ":", "*:", ":*", "1:", ":1", "0:0", "0:*", "0:1", "1:0", "1:2 ", "1: 2",
    "1:2:", "1:2,", "1:2:3", "1:2,3", "*:4294967296", "0:4294967295",
    "1:4294967296", "4294967296:*", "4294967295:0", "4294967296:1",
    "4294967295:4294967296",
]

VALID_RANGES = [
    ("*", NumRange(0, 0)),
    ("1", NumRange(1, 1)),
    ("42", NumRange(42, 42)),
    ("1000", NumRange(1000, 1000)),
    ("4294967295", NumRange(MAX, MAX)),
    ("*:*", NumRange(0, 0)),
    ("1:*", NumRange(1, 0)),
    ("*:1", NumRange(1, 0)),
    ("2:2", NumRange(2, 2)),
    ("2:42", NumRange(2, 42)),
    ("42:2", NumRange(2, 42)),
    ("*:4294967294", NumRange(MAX - 1, 0)),
    ("*:4294967295", NumRange(MAX, 0)),
    ("4294967294:*", NumRange(MAX - 1, 0)),
    ("4294967295:*", NumRange(MAX, 0)),
    ("1:4294967294", NumRange(1, MAX - 1)),
    ("1:4294967295", NumRange(1, MAX)),
    ("4294967295:1000", NumRange(1000, MAX)),
    ("4294967294:4294967295", NumRange(MAX - 1, MAX)),
    ("4294967295:4294967295", NumRange(MAX, MAX)),
]


@pytest.mark.parametrize("value", INVALID_RANGES)
def test_parse_num_range_invalid(value):
    with pytest.raises(BadNumSetError):
        parse_num_range(value)


@pytest.mark.parametrize("value, expected", VALID_RANGES)
def test_parse_num_range_valid(value, expected):
    assert parse_num_range(value) == expected


CONTAINS_LESS = [
    ("2", 0, False, True), ("2", 1, False, False), ("2", 2, True, False),
    ("2", 3, False, True), ("2", MAX, False, True),
    ("*", 0, True, False), ("*", 1, False, False), ("*", 2, False, False),
    ("*", 3, False, False), ("*", MAX, False, False),
    ("2:3", 0, False, True), ("2:3", 1, False, False), ("2:3", 2, True, False),
    ("2:3", 3, True, False), ("2:3", 4, False, True), ("2:3", 5, False, True),
    ("2:4", 0, False, True), ("2:4", 1, False, False), ("2:4", 2, True, False),
    ("2:4", 3, True, False), ("2:4", 4, True, False), ("2:4", 5, False, True),
    ("4:4294967295", 0, False, True), ("4:4294967295", 1, False, False),
    ("4:4294967295", 2, False, False), ("4:4294967295", 3, False, False),
    ("4:4294967295", 4, True, False), ("4:4294967295", 5, True, False),
    ("4:4294967295", MAX, True, False),
    ("4:*", 0, True, False), ("4:*", 1, False, False), ("4:*", 2, False, False),
    ("4:*", 3, False, False), ("4:*", 4, True, False), ("4:*", 5, True, False),
    ("4:*", MAX, True, False),
]


@pytest.mark.parametrize("value, q, contains, less", CONTAINS_LESS)
def test_range_contains_less(value, q, contains, less):
    r = parse_num_range(value)
    assert r.contains(q) is contains
    assert r.less(q) is less


MERGE = [
    ("1", "1", "1"), ("1", "2", "1:2"), ("1", "3", ""), ("1", "4294967295", ""),
    ("1", "*", ""),
    ("4", "1", ""), ("4", "2", ""), ("4", "3", "3:4"), ("4", "4", "4"),
    ("4", "5", "4:5"), ("4", "6", ""),
    ("4294967295", "4294967293", ""),
    ("4294967295", "4294967294", "4294967294:4294967295"),
    ("4294967295", "4294967295", "4294967295"), ("4294967295", "*", ""),
    ("*", "1", ""), ("*", "2", ""), ("*", "4294967294", ""),
    ("*", "4294967295", ""), ("*", "*", "*"),
    ("1:3", "1", "1:3"), ("1:3", "2", "1:3"), ("1:3", "3", "1:3"),
    ("1:3", "4", "1:4"), ("1:3", "5", ""), ("1:3", "*", ""),
    ("3:4", "1", ""), ("3:4", "2", "2:4"), ("3:4", "3", "3:4"),
    ("3:4", "4", "3:4"), ("3:4", "5", "3:5"), ("3:4", "6", ""), ("3:4", "*", ""),
    ("2:3", "5", ""), ("2:4", "5", "2:5"), ("2:5", "5", "2:5"),
    ("2:6", "5", "2:6"), ("2:7", "5", "2:7"), ("2:*", "5", "2:*"),
    ("3:4", "5", "3:5"), ("3:5", "5", "3:5"), ("3:6", "5", "3:6"),
    ("3:7", "5", "3:7"), ("3:*", "5", "3:*"), ("4:5", "5", "4:5"),
    ("4:6", "5", "4:6"), ("4:7", "5", "4:7"), ("4:*", "5", "4:*"),
    ("5:6", "5", "5:6"), ("5:7", "5", "5:7"), ("5:*", "5", "5:*"),
    ("6:7", "5", "5:7"), ("6:*", "5", "5:*"), ("7:8", "5", ""), ("7:*", "5", ""),
    ("3:4294967294", "1", ""), ("3:4294967294", "2", "2:4294967294"),
    ("3:4294967294", "3", "3:4294967294"), ("3:4294967294", "4", "3:4294967294"),
    ("3:4294967294", "4294967293", "3:4294967294"),
    ("3:4294967294", "4294967294", "3:4294967294"),
    ("3:4294967294", "4294967295", "3:4294967295"), ("3:4294967294", "*", ""),
    ("3:4294967295", "1", ""), ("3:4294967295", "2", "2:4294967295"),
    ("3:4294967295", "3", "3:4294967295"), ("3:4294967295", "4", "3:4294967295"),
    ("3:4294967295", "4294967294", "3:4294967295"),
    ("3:4294967295", "4294967295", "3:4294967295"), ("3:4294967295", "*", ""),
    ("1:4294967295", "1", "1:4294967295"),
    ("1:4294967295", "4294967295", "1:4294967295"), ("1:4294967295", "*", ""),
    ("1:*", "1", "1:*"), ("1:*", "2", "1:*"), ("1:*", "4294967294", "1:*"),
    ("1:*", "4294967295", "1:*"), ("1:*", "*", "1:*"),
    ("5:8", "1:2", ""), ("5:8", "1:3", ""), ("5:8", "1:4", "1:8"),
    ("5:8", "1:5", "1:8"), ("5:8", "1:6", "1:8"), ("5:8", "1:7", "1:8"),
    ("5:8", "1:8", "1:8"), ("5:8", "1:9", "1:9"), ("5:8", "1:10", "1:10"),
    ("5:8", "1:11", "1:11"), ("5:8", "1:*", "1:*"),
    ("5:8", "2:3", ""), ("5:8", "2:4", "2:8"), ("5:8", "2:5", "2:8"),
    ("5:8", "2:6", "2:8"), ("5:8", "2:7", "2:8"), ("5:8", "2:8", "2:8"),
    ("5:8", "2:9", "2:9"), ("5:8", "2:10", "2:10"), ("5:8", "2:11", "2:11"),
    ("5:8", "2:*", "2:*"),
    ("5:8", "3:4", "3:8"), ("5:8", "3:5", "3:8"), ("5:8", "3:6", "3:8"),
    ("5:8", "3:7", "3:8"), ("5:8", "3:8", "3:8"), ("5:8", "3:9", "3:9"),
    ("5:8", "3:10", "3:10"), ("5:8", "3:11", "3:11"), ("5:8", "3:*", "3:*"),
    ("5:8", "4:5", "4:8"), ("5:8", "4:6", "4:8"), ("5:8", "4:7", "4:8"),
    ("5:8", "4:8", "4:8"), ("5:8", "4:9", "4:9"), ("5:8", "4:10", "4:10"),
    ("5:8", "4:11", "4:11"), ("5:8", "4:*", "4:*"),
    ("5:8", "5:6", "5:8"), ("5:8", "5:7", "5:8"), ("5:8", "5:8", "5:8"),
    ("5:8", "5:9", "5:9"), ("5:8", "5:10", "5:10"), ("5:8", "5:11", "5:11"),
    ("5:8", "5:*", "5:*"),
    ("5:8", "6:7", "5:8"), ("5:8", "6:8", "5:8"), ("5:8", "6:9", "5:9"),
    ("5:8", "6:10", "5:10"), ("5:8", "6:11", "5:11"), ("5:8", "6:*", "5:*"),
    ("5:8", "7:8", "5:8"), ("5:8", "7:9", "5:9"), ("5:8", "7:10", "5:10"),
    ("5:8", "7:11", "5:11"), ("5:8", "7:*", "5:*"),
    ("5:8", "8:9", "5:9"), ("5:8", "8:10", "5:10"), ("5:8", "8:11", "5:11"),
    ("5:8", "8:*", "5:*"),
    ("5:8", "9:10", "5:10"), ("5:8", "9:11", "5:11"), ("5:8", "9:*", "5:*"),
    ("5:8", "10:11", ""), ("5:8", "10:*", ""),
    ("1:*", "1:*", "1:*"), ("1:*", "2:*", "1:*"), ("1:*", "1:4294967294", "1:*"),
    ("1:*", "1:4294967295", "1:*"), ("1:*", "2:4294967295", "1:*"),
    ("1:4294967295", "1:4294967294", "1:4294967295"),
    ("1:4294967295", "1:4294967295", "1:4294967295"),
    ("1:4294967295", "2:4294967295", "1:4294967295"),
    ("1:4294967295", "2:*", "1:*"),
]


@pytest.mark.parametrize("left, right, expected", MERGE)
def test_range_merge(left, right, expected):
    s = parse_num_range(left)
    t = parse_num_range(right)
    for a, b in ((s, t), (t, s)):
        result = a.merge(b)
        if expected:
            assert result is not None
            assert str(result) == expected
        else:
            assert result is None


INFO = [
    ("", [], [0, 1, 2, 3, MAX]),
    ("2", [2], [0, 1, 3, MAX]),
    ("*", [], [0, 1, 2, 3, MAX]),
    ("1:*", [1, MAX], [0]),
    ("2:4", [2, 3, 4], [0, 1, 5, MAX]),
    ("2,4", [2, 4], [0, 1, 3, 5, MAX]),
    ("2:4,6", [2, 3, 4, 6], [0, 1, 5, 7]),
    ("2,4:6", [2, 4, 5, 6], [0, 1, 3, 7]),
    ("2,4,6", [2, 4, 6], [0, 1, 3, 5, 7]),
    ("1,3:5,7,9:*", [1, 3, 4, 5, 7, 9, 10, MAX], [0, 2, 6, 8]),
    ("1,3:5,7,9,42", [1, 3, 4, 5, 7, 9, 42], [0, 2, 6, 8, 10, 41, 43, MAX]),
    ("1,3:5,7,9,42,*", [1, 3, 4, 5, 7, 9, 42], [0, 2, 6, 8, 10, 41, 43, MAX]),
    (
        "1,3:5,7,9,42,60:70,100:*",
        [1, 3, 4, 5, 7, 9, 42, 60, 65, 70, 100, 1000, MAX],
        [0, 2, 6, 8, 10, 41, 43, 59, 71, 99],
    ),
]


@pytest.mark.parametrize("value, members, non_members", INFO)
def test_num_set_info(value, members, non_members):
    s = parse_set(value) if value else NumberSet()
    check_num_set(s)
    for q in members:
        assert s.contains(q) is True
    for q in non_members:
        assert s.contains(q) is False
    assert str(s) == value
    assert (len(s) == 0) == (value == "")
    assert s.dynamic() == (value != "" and value.endswith("*"))


PARSE = [
    ("1,1", "1"), ("1,2", "1:2"), ("1,3", "1,3"), ("1,*", "1,*"),
    ("1,1,1", "1"), ("1,1,2", "1:2"), ("1,1:2", "1:2"), ("1,1,3", "1,3"),
    ("1,1:3", "1:3"), ("1,2,2", "1:2"), ("1,2,3", "1:3"), ("1,2:3", "1:3"),
    ("1,2,4", "1:2,4"), ("1,3,3", "1,3"), ("1,3,4", "1,3:4"), ("1,3:4", "1,3:4"),
    ("1,3,5", "1,3,5"), ("1,3:5", "1,3:5"), ("1:3,5", "1:3,5"), ("1:5,3", "1:5"),
    ("1,2,3,4", "1:4"), ("1,2,4,5", "1:2,4:5"), ("1,2,4:5", "1:2,4:5"),
    ("1:2,4:5", "1:2,4:5"),
    ("1,2,3,4,5", "1:5"), ("1,2:3,4:5", "1:5"),
    ("1,2,4,5,7,9", "1:2,4:5,7,9"), ("1,2,4,5,7:9", "1:2,4:5,7:9"),
    ("1:2,4:5,7:9", "1:2,4:5,7:9"), ("1,2,4,5,7,8,9", "1:2,4:5,7:9"),
    ("1:2,4:5,7,8,9", "1:2,4:5,7:9"),
    ("3,5:10,15:20", "3,5:10,15:20"), ("4,5:10,15:20", "4:10,15:20"),
    ("5,5:10,15:20", "5:10,15:20"), ("7,5:10,15:20", "5:10,15:20"),
    ("10,5:10,15:20", "5:10,15:20"), ("11,5:10,15:20", "5:11,15:20"),
    ("12,5:10,15:20", "5:10,12,15:20"), ("14,5:10,15:20", "5:10,14:20"),
    ("17,5:10,15:20", "5:10,15:20"), ("21,5:10,15:20", "5:10,15:21"),
    ("22,5:10,15:20", "5:10,15:20,22"), ("*,5:10,15:20", "5:10,15:20,*"),
    ("1:3,5:10,15:20", "1:3,5:10,15:20"), ("1:4,5:10,15:20", "1:10,15:20"),
    ("1:8,5:10,15:20", "1:10,15:20"), ("1:13,5:10,15:20", "1:13,15:20"),
    ("1:14,5:10,15:20", "1:20"), ("7:17,5:10,15:20", "5:20"),
    ("11:14,5:10,15:20", "5:20"), ("12,13,5:10,15:20", "5:10,12:13,15:20"),
    ("12:13,5:10,15:20", "5:10,12:13,15:20"), ("12:14,5:10,15:20", "5:10,12:20"),
    ("11:13,5:10,15:20", "5:13,15:20"), ("11,12,13,14,5:10,15:20", "5:20"),
    ("1:*,5:10,15:20", "1:*"), ("4:*,5:10,15:20", "4:*"),
    ("6:*,5:10,15:20", "5:*"), ("12:*,5:10,15:20", "5:10,12:*"),
    ("19:*,5:10,15:20", "5:10,15:*"),
    ("5:8,6,7:10,15,16,17,18:20,19,21:*", "5:10,15:*"),
    ("4:13,1,5,10,15,20", "1,4:13,15,20"), ("4:14,1,5,10,15,20", "1,4:15,20"),
    ("4:15,1,5,10,15,20", "1,4:15,20"), ("4:16,1,5,10,15,20", "1,4:16,20"),
    ("4:17,1,5,10,15,20", "1,4:17,20"), ("4:18,1,5,10,15,20", "1,4:18,20"),
    ("4:19,1,5,10,15,20", "1,4:20"), ("4:20,1,5,10,15,20", "1,4:20"),
    ("4:21,1,5,10,15,20", "1,4:21"), ("4:*,1,5,10,15,20", "1,4:*"),
    ("1,3,5,7,9,11,13,15,17,19", "1,3,5,7,9,11,13,15,17,19"),
    ("1,3,5,7,9,11:13,15,17,19", "1,3,5,7,9,11:13,15,17,19"),
    ("1,3,5,7,9:11,13:15,17,19", "1,3,5,7,9:11,13:15,17,19"),
    ("1,3,5,7:9,11:13,15:17,19", "1,3,5,7:9,11:13,15:17,19"),
    ("1,3,5,7,9,11,13,15,17,19,*", "1,3,5,7,9,11,13,15,17,19,*"),
    ("1,3,5,7,9,11,13,15,17,19:*", "1,3,5,7,9,11,13,15,17,19:*"),
    ("1:20,3,5,7,9,11,13,15,17,19,*", "1:20,*"),
    ("1:20,3,5,7,9,11,13,15,17,19:*", "1:*"),
    ("4294967295,*", "4294967295,*"), ("1,4294967295,*", "1,4294967295,*"),
    ("1:4294967295,*", "1:4294967295,*"), ("1,4294967295:*", "1,4294967295:*"),
    ("1:*,4294967295", "1:*"), ("1:*,4294967295:*", "1:*"),
    ("1:4294967295,4294967295:*", "1:*"),
]


@pytest.mark.parametrize("value, expected", PARSE)
def test_parse_set_with_permutations(value, expected):
    rng = random.Random(19860201)
    parts = value.split(",")
    candidates = [value]
    for _ in range(30):
        rng.shuffle(parts)
        candidates.append(",".join(parts))
    for candidate in candidates:
        s = parse_set(candidate)
        check_num_set(s)
        assert str(s) == expected, candidate


@pytest.mark.parametrize(
    "nums, rng, other, expected",
    [
        ([5], (1, 3), "1:2,5,7:13,15,17:*", "1:3,5,7:13,15,17:*"),
        ([5], (3, 1), "2:3,7:13,15,17:*", "1:3,5,7:13,15,17:*"),
        ([15], (17, 0), "1:3,5,7:13", "1:3,5,7:13,15,17:*"),
        ([15], (0, 17), "1:3,5,7:13", "1:3,5,7:13,15,17:*"),
        ([1, 3, 5, 7, 9, 11, 0], (8, 13), "2,15,17:*", "1:3,5,7:13,15,17:*"),
        ([5, 1, 7, 3, 9, 0, 11], (8, 13), "2,15,17:*", "1:3,5,7:13,15,17:*"),
        ([5, 1, 7, 3, 9, 0, 11], (13, 8), "2,15,17:*", "1:3,5,7:13,15,17:*"),
    ],
)
def test_add_num_range_set(nums, rng, other, expected):
    s = NumberSet()
    s.add_num(*nums)
    check_num_set(s)
    s.add_range(*rng)
    check_num_set(s)
    s.add_set(parse_set(other))
    check_num_set(s)
    assert str(s) == expected


def test_nums_static():
    assert parse_set("1:3,5").nums() == [1, 2, 3, 5]
    assert NumberSet().nums() == []


@pytest.mark.parametrize("value", ["*", "3:*", "1,5,*"])
def test_nums_dynamic_raises(value):
    with pytest.raises(ValueError):
        parse_set(value).nums()


def test_parse_set_rejects_bad_item():
    with pytest.raises(BadNumSetError) as info:
        parse_set("1,0,3")
    assert info.value.value == "0"


def test_range_str_and_membership():
    assert str(NumRange(3, 0)) == "3:*"
    assert str(NumRange(0, 0)) == "*"
    s = parse_set("2:4")
    assert 3 in s
    assert 5 not in s
    assert list(s) == [NumRange(2, 4)]


def test_init_normalises_ranges():
    s = NumberSet([NumRange(5, 6), NumRange(1, 4)])
    assert str(s) == "1:6"
    assert s == parse_set("1:6")