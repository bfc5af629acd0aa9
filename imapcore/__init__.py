"""Core IMAP building blocks: wire codec, number sets, modified UTF-7, command argument parsing and mailbox tracking."""

__version__ = "0.1.0"