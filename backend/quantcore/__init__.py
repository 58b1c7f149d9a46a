"""Core quantitative logic: indicators, alpha signals, and trade decisions.

This package contains pure business logic with no I/O dependencies
(no network, broker, or storage access). External collaborators such as
price history, quotes, positions and order submission are described by
the protocols in ``quantcore.protocols`` and injected by the caller.
"""
