from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, Table
from sqlalchemy.orm import relationship

from .base import Base, now_utc


# Pure association tables (no mapped class) for role assignment
user_roles = Table(
    'user_roles',
    Base.metadata,
    Column('user_id', Integer, ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    Column('role_id', Integer, ForeignKey('roles.id', ondelete='CASCADE'), primary_key=True),
)

role_permissions = Table(
    'role_permissions',
    Base.metadata,
    Column('role_id', Integer, ForeignKey('roles.id', ondelete='CASCADE'), primary_key=True),
    Column('permission_id', Integer, ForeignKey('permissions.id', ondelete='CASCADE'), primary_key=True),
)


class User(Base):
    __tablename__ = 'users'
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    email_verified_at = Column(DateTime(timezone=True), nullable=True)
    password = Column(String(255), nullable=False)
    country_id = Column(Integer, ForeignKey('countries.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    country = relationship("Country", back_populates="users")
    roles = relationship("Role", secondary=user_roles, back_populates="users", order_by="Role.id")
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_users_country_id', 'country_id'),
    )

    @property
    def role_names(self):
        return [role.name for role in self.roles]

    @property
    def permission_names(self):
        names = set()
        for role in self.roles:
            names.update(p.name for p in role.permissions)
        return names

    def has_role(self, name: str) -> bool:
        return name in self.role_names

    def has_permission_to(self, name: str) -> bool:
        return name in self.permission_names


class Role(Base):
    __tablename__ = 'roles'
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(125), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    users = relationship("User", secondary=user_roles, back_populates="roles")
    permissions = relationship("Permission", secondary=role_permissions, back_populates="roles")


class Permission(Base):
    __tablename__ = 'permissions'
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(125), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    roles = relationship("Role", secondary=role_permissions, back_populates="permissions")


class UserSession(Base):
    __tablename__ = 'user_sessions'
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String, nullable=True)
    last_activity = Column(DateTime(timezone=True), default=now_utc)

    user = relationship("User", back_populates="sessions")

    __table_args__ = (
        Index('idx_user_sessions_user_id', 'user_id'),
    )
