# models/department.py

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from core.database import Base


class Department(Base):
    __tablename__ = "departments"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)

    # When true, requirements live only inside sub-departments
    has_sub_departments = Column(Boolean, nullable=False, default=False)
    sort_order = Column(Integer, nullable=False, default=0)

    sub_departments = relationship(
        "SubDepartment",
        back_populates="department",
        cascade="all, delete-orphan",
        order_by="SubDepartment.sort_order",
    )

    def __repr__(self):
        return f"<Department {self.id} - {self.name}>"


class SubDepartment(Base):
    __tablename__ = "sub_departments"

    id = Column(String, primary_key=True, index=True)
    department_id = Column(String, ForeignKey("departments.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)

    department = relationship("Department", back_populates="sub_departments")

    def __repr__(self):
        return f"<SubDepartment {self.id} - {self.name}>"
