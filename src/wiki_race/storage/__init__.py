from .link_db import WikiLinkDB, create_snapshot

__all__ = ["WikiLinkDB", "create_snapshot"]
