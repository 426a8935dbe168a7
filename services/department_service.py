from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from core import entities
from models.department import Department, SubDepartment
from models.patient import Patient
from services.patient_service import delete_patient, patient_to_entity


# ------------------------------------------
# Load the whole department tree
# ------------------------------------------
def list_departments(db: Session) -> List[entities.Department]:
    depts = db.query(Department).order_by(Department.sort_order, Department.id).all()
    subs = db.query(SubDepartment).order_by(SubDepartment.sort_order, SubDepartment.id).all()
    patients = (
        db.query(Patient)
        .options(selectinload(Patient.entries), selectinload(Patient.photos))
        .order_by(Patient.sort_order, Patient.id)
        .all()
    )

    result = []
    for d in depts:
        direct = [patient_to_entity(p) for p in patients if p.department_id == d.id and not p.sub_department_id]
        dept_subs = [
            entities.SubDepartment(
                id=s.id,
                name=s.name,
                sort_order=s.sort_order or 0,
                patients=[patient_to_entity(p) for p in patients if p.sub_department_id == s.id],
            )
            for s in subs
            if s.department_id == d.id
        ]
        result.append(
            entities.Department(
                id=d.id,
                name=d.name,
                has_sub_departments=bool(d.has_sub_departments),
                patients=direct,
                sub_departments=dept_subs,
                sort_order=d.sort_order or 0,
            )
        )
    return result


# ------------------------------------------
# Departments
# ------------------------------------------
def upsert_department(db: Session, dept: entities.Department) -> Department:
    row = db.query(Department).filter(Department.id == dept.id).first()
    if row is None:
        current = db.query(func.max(Department.sort_order)).scalar()
        row = Department(id=dept.id, sort_order=dept.sort_order or (current or 0) + 1)
        db.add(row)
    row.name = dept.name
    row.has_sub_departments = dept.has_sub_departments
    db.commit()
    db.refresh(row)
    return row


def delete_department(db: Session, dept_id: str, upload_dir: str) -> bool:
    row = db.query(Department).filter(Department.id == dept_id).first()
    if not row:
        return False

    # Requirements go through delete_patient so their photo blobs are removed too
    patient_ids = [pid for (pid,) in db.query(Patient.id).filter(Patient.department_id == dept_id).all()]
    for pid in patient_ids:
        delete_patient(db, pid, upload_dir)

    db.delete(row)
    db.commit()
    return True


# ------------------------------------------
# Sub-departments
# ------------------------------------------
def upsert_sub_department(db: Session, sub: entities.SubDepartment, department_id: str) -> SubDepartment:
    row = db.query(SubDepartment).filter(SubDepartment.id == sub.id).first()
    if row is None:
        current = (
            db.query(func.max(SubDepartment.sort_order))
            .filter(SubDepartment.department_id == department_id)
            .scalar()
        )
        row = SubDepartment(id=sub.id, sort_order=sub.sort_order or (current or 0) + 1)
        db.add(row)
    row.department_id = department_id
    row.name = sub.name
    db.commit()
    db.refresh(row)
    return row


def delete_sub_department(db: Session, sub_id: str, upload_dir: str) -> bool:
    row = db.query(SubDepartment).filter(SubDepartment.id == sub_id).first()
    if not row:
        return False

    patient_ids = [pid for (pid,) in db.query(Patient.id).filter(Patient.sub_department_id == sub_id).all()]
    for pid in patient_ids:
        delete_patient(db, pid, upload_dir)

    db.delete(row)
    db.commit()
    return True
