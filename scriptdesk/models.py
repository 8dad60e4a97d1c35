from sqlalchemy import Column, Integer, Text
from scriptdesk.database import Base

class Script(Base):
    __tablename__ = "scripts"
    # AUTOINCREMENT keeps sqlite from handing out the id of a deleted row again
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    # server_default keeps title out of INSERTs, so untitled tables accept them too
    title = Column(Text, nullable=False, server_default="")
    english_text = Column(Text, nullable=False)
    japanese_text = Column(Text, nullable=False)
