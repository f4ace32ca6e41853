from sqlalchemy import Column, Integer, String, ForeignKey, JSON
from sqlalchemy.orm import relationship
from newsdesk.database import Base
from newsdesk.permissions_config.permissions import to_permission_set


# Role model: a named default permission set shared by many users
class Role(Base):
    __tablename__ = "roles"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    permissions = Column(JSON, nullable=False, default=list)  # Permission ids

    @property
    def permission_set(self) -> frozenset:
        return to_permission_set(self.permissions)

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name})>"


# User model: only the authorization-relevant fields live here
class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, index=True)
    email = Column(String, unique=True, nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    role = relationship("Role", lazy="joined")

    # Overlays applied on top of the role at resolution time, never merged into it
    extra_permissions = Column(JSON, nullable=False, default=list)
    removed_permissions = Column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role_id={self.role_id})>"
