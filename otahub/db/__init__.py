from otahub.db.session import SessionLocal, engine

__all__ = ["SessionLocal", "engine"]
