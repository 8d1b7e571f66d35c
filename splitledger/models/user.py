# splitledger/models/user.py

from sqlalchemy import Column, BigInteger, Integer, String, DateTime, func
from splitledger.db import Base

class User(Base):
    """
    Пользователь (участник групп). Поля профиля приходят из Telegram WebApp,
    email/phone пользователь задаёт сам: по ним его находят для добавления в группу.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    telegram_id = Column(BigInteger, unique=True, nullable=False, index=True)
    username = Column(String, index=True, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    name = Column(String, index=True, nullable=True)  # Отображаемое имя
    email = Column(String(320), unique=True, index=True, nullable=True)
    phone = Column(String(32), unique=True, index=True, nullable=True)
    photo_url = Column(String, nullable=True)
    language_code = Column(String(8), nullable=True)
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, telegram_id={self.telegram_id}, name={self.name}, email={self.email})>"
