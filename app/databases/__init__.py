from app.databases.mongodb import mongodb
__all__ = ["mongodb"]
