"""Git tags used as release state markers.

Kinds: version tags (``v1.2.3``), environment tags (``production``),
state tags (``v1.2.3-stable``), the movable ``stable``/``unstable`` pointers,
and rollback tracking tags (``rollback-<timestamp>-<env>``).
"""
