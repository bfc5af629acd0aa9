# imapcore

Building blocks for IMAP software: the parts a client or server needs
beneath the network connection.

- `imapcore.utf7`: modified UTF-7 for mailbox names (`encode`, `decode`,
  `escape`). Bad input to `decode` raises `InvalidUTF7Error`.
- `imapcore.imapnum`: sequence sets such as `1:3,5,7:*` (`NumRange`,
  `NumberSet`, `parse_num_range`, `parse_set`). A malformed value raises
  `BadNumSetError`.
- `imapcore.numset`: the typed sets `SeqSet` and `UIDSet`, the helpers
  `seq_set_num` and `uid_set_num`, and the `$` marker for SEARCHRES
  (`search_res`, `is_search_res`).
- `imapcore.wire`: `ConnSide`, `NumKind`, `ContinuationRequest`,
  `num_set_kind` and `parse_seq_set`.
- `imapcore.decoder` and `imapcore.encoder`: `Decoder` reads IMAP wire
  data from bytes or a binary stream, and `Encoder` writes it. They cover
  atoms, quoted strings, literals, lists, numbers, number sets, flags and
  mailbox names. The `expect_*` methods of `Decoder` raise
  `DecoderExpectError`.
- `imapcore.grammar`: flags, mailbox attributes, dates and date-times, and
  SASL base64 (`encode_sasl`, `decode_sasl`).
- `imapcore.search`, `imapcore.data`, `imapcore.response`: data types for
  commands and responses. `SearchCriteria.intersect` combines criteria.
- `imapcore.tracker`: `MailboxTracker` and `SessionTracker` keep each
  session's view of a mailbox. They queue updates, write them through
  `poll` or `idle`, and map sequence numbers between the server's view and
  the client's.
- `imapcore.commands`: parses the arguments of SEARCH, STATUS and STORE
  (`parse_search_args`, `parse_status_args`, `parse_store_args`).

## Install

```
pip install .
```

## Examples

Mailbox names:

```python
from imapcore import utf7

utf7.encode("~peter/mail/台北/日本語")   # '~peter/mail/&U,BTFw-/&ZeVnLIqe-'
utf7.decode("&Jjo-!")                    # '☺!'
```

Sequence sets:

```python
from imapcore.imapnum import parse_set

s = parse_set("4:13,1,5,10,15,20")
str(s)          # '1,4:13,15,20'
s.contains(7)   # True
s.dynamic()     # False
```

Reading and writing wire data:

```python
import io

from imapcore.commands import parse_store_args
from imapcore.decoder import Decoder
from imapcore.encoder import Encoder
from imapcore.wire import ConnSide, NumKind

dec = Decoder(b" 1:3 +FLAGS.SILENT (\\Seen)\r\n", ConnSide.SERVER)
cmd = parse_store_args(dec, NumKind.SEQ)
str(cmd.num_set), cmd.flags.op, cmd.flags.silent, cmd.flags.flags
# ('1:3', <StoreFlagsOp.ADD: 1>, True, ['\\Seen'])

out = io.BytesIO()
Encoder(out, ConnSide.SERVER).atom("*").sp().atom("SEARCH").sp().number(2).crlf()
out.getvalue()   # b'* SEARCH 2\r\n'
```

Sequence numbers in the tracker:

```python
from imapcore.tracker import MailboxTracker

mailbox = MailboxTracker(42)
session = mailbox.new_session()
mailbox.queue_expunge(10)
session.decode_seq_num(20)   # 19
```

Errors that an IMAP server reports as status responses are raised as
`imapcore.response.IMAPError`.

## What it does not do

There is no IMAP server or client here. The package does not open
sockets, keep connections, handle TLS or STARTTLS, or authenticate users.
It does not store mailboxes or messages either. It parses and formats
protocol data and tracks sequence numbers. Running the commands against
real mailboxes is left to the code that uses it.

## Tests

```
pip install .[test]
pytest
```