from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from admin_panel.utils.locale import get_locale
from .base import Base


class Country(Base):
    __tablename__ = 'countries'
    id = Column(Integer, primary_key=True, autoincrement=True)
    es_name = Column(String(255), nullable=False)
    en_name = Column(String(255), nullable=False)
    iso_code = Column(String(3), nullable=True)
    phone_code = Column(String(8), nullable=True)

    users = relationship("User", back_populates="country")
    # Sessions of every user living in the country (reaches through `users`)
    sessions = relationship(
        "UserSession",
        secondary="users",
        primaryjoin="Country.id == User.country_id",
        secondaryjoin="User.id == UserSession.user_id",
        viewonly=True,
    )

    @property
    def name(self) -> str:
        if get_locale() == 'es':
            return self.es_name
        return self.en_name
