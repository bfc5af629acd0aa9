import datetime as dt

import pytest

from imapcore.numset import search_res, seq_set_num, uid_set_num
from imapcore.search import (
    SearchCriteria,
    SearchCriteriaHeaderField,
    SearchCriteriaMetadataType,
    SearchCriteriaModSeq,
    SearchData,
    SearchOptions,
)


def test_intersect_appends_lists():
    a = SearchCriteria(body=["hello"], flag=["\\Seen"], seq_num=[seq_set_num(1)])
    b = SearchCriteria(
        body=["world"],
        not_flag=["\\Deleted"],
        uid=[uid_set_num(7)],
        header=[SearchCriteriaHeaderField("Subject", "hi")],
    )
    a.intersect(b)
    assert a.body == ["hello", "world"]
    assert a.flag == ["\\Seen"]
    assert a.not_flag == ["\\Deleted"]
    assert a.seq_num == [seq_set_num(1)]
    assert a.uid == [uid_set_num(7)]
    assert a.header == [SearchCriteriaHeaderField("Subject", "hi")]


def test_intersect_since_takes_later_date():
    early = dt.date(2020, 1, 1)
    late = dt.date(2021, 6, 1)
    a = SearchCriteria(since=early, sent_since=late)
    a.intersect(SearchCriteria(since=late, sent_since=early))
    assert a.since == late
    assert a.sent_since == late


def test_intersect_before_takes_earlier_date():
    early = dt.date(2020, 1, 1)
    late = dt.date(2021, 6, 1)
    a = SearchCriteria(before=late, sent_before=early)
    a.intersect(SearchCriteria(before=early, sent_before=late))
    assert a.before == early
    assert a.sent_before == early


def test_intersect_unset_dates():
    day = dt.date(2022, 3, 4)
    a = SearchCriteria()
    a.intersect(SearchCriteria(since=day))
    assert a.since == day
    assert a.before is None
    b = SearchCriteria(before=day)
    b.intersect(SearchCriteria())
    assert b.before == day


def test_intersect_sizes():
    a = SearchCriteria(larger=100, smaller=5000)
    a.intersect(SearchCriteria(larger=200, smaller=1000))
    assert a.larger == 200
    assert a.smaller == 1000

    b = SearchCriteria()
    b.intersect(SearchCriteria(larger=10))
    assert b.larger == 10


def test_intersect_not_and_or():
    inner = SearchCriteria(body=["x"])
    pair = (SearchCriteria(body=["hello"]), SearchCriteria(body=["world"]))
    a = SearchCriteria()
    a.intersect(SearchCriteria(not_=[inner], or_=[pair]))
    assert a.not_ == [inner]
    assert a.or_ == [pair]


def test_default_lists_independent():
    a = SearchCriteria()
    b = SearchCriteria()
    a.body.append("only a")
    assert b.body == []


def test_all_seq_nums():
    data = SearchData(all=seq_set_num(1, 2, 5))
    assert data.all_seq_nums() == [1, 2, 5]
    assert data.all_uids() == []


def test_all_uids():
    data = SearchData(all=uid_set_num(3, 4), uid=True)
    assert data.all_uids() == [3, 4]
    assert data.all_seq_nums() == []


def test_all_dynamic_raises():
    with pytest.raises(ValueError):
        SearchData(all=seq_set_num(1, 0)).all_seq_nums()
    with pytest.raises(ValueError):
        SearchData(all=uid_set_num(0)).all_uids()


def test_all_search_res_is_empty():
    assert SearchData(all=search_res()).all_uids() == []


def test_options_and_modseq_defaults():
    opts = SearchOptions(return_min=True)
    assert (opts.return_min, opts.return_all, opts.return_save) == (True, False, False)
    ms = SearchCriteriaModSeq(mod_seq=620162338)
    assert ms.metadata_name == ""
    assert ms.metadata_type is None
    assert SearchCriteriaMetadataType("priv") is SearchCriteriaMetadataType.PRIVATE