from app.db.models.entry import Entry

__all__ = ["Entry"]
