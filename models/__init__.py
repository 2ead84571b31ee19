"""
Persistence package.

`storage` is the process-wide DBStorage (engine + scoped_session) used by the
stores and torn down per request by the application factory.
"""
from models.db_storage import DBStorage

storage = DBStorage()
storage.reload()
