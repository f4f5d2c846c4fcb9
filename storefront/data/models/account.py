from sqlalchemy import Column, Integer, String, Date
from storefront.data.database import Base


class AccountModel(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    username = Column(String(255), unique=True, nullable=False, index=True)
    #null dla kont zalozonych przez google
    password_hash = Column(String(255), nullable=True)

    full_name = Column(String(255), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    address = Column(String(500), nullable=True)
    email = Column(String(255), unique=True, nullable=True, index=True)
