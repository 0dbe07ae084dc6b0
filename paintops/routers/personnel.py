from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from paintops.auth import Principal, get_current_principal
from paintops.db import get_db
from paintops.schemas import (
    StaffCreate,
    StaffOut,
    StaffUpdate,
    SubcontractorCreate,
    SubcontractorOut,
    SubcontractorUpdate,
    SupplierCreate,
    SupplierOut,
    SupplierUpdate,
)
from paintops.services import personnel_service
from paintops.services.personnel_service import PersonnelKind

router = APIRouter(prefix='/api', tags=['personnel'])


def _register(
    path: str,
    kind: PersonnelKind,
    create_schema: type[BaseModel],
    update_schema: type[BaseModel],
    out_schema: type[BaseModel],
) -> None:
    """Attach list/get/create/update/delete routes for one personnel table."""

    def list_records(db: Session = Depends(get_db), _: Principal = Depends(get_current_principal)):
        return personnel_service.list_people(db, kind)

    def get_record(record_id: int, db: Session = Depends(get_db), _: Principal = Depends(get_current_principal)):
        return personnel_service.get_person(db, kind, record_id=record_id)

    def create_record(
        payload: create_schema,
        db: Session = Depends(get_db),
        principal: Principal = Depends(get_current_principal),
    ):
        record = personnel_service.create_person(db, kind, user_id=principal.id, fields=payload.model_dump())
        db.commit()
        return record

    def update_record(
        record_id: int,
        payload: update_schema,
        db: Session = Depends(get_db),
        principal: Principal = Depends(get_current_principal),
    ):
        record = personnel_service.update_person(
            db, kind, record_id=record_id, user_id=principal.id, changes=payload.model_dump(exclude_unset=True)
        )
        db.commit()
        return record

    def delete_record(record_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
        personnel_service.delete_person(db, kind, record_id=record_id, user_id=principal.id)
        db.commit()

    name = kind.activity_prefix
    router.add_api_route(f'/{path}', list_records, methods=['GET'], response_model=list[out_schema], name=f'list_{name}')
    router.add_api_route(f'/{path}/{{record_id}}', get_record, methods=['GET'], response_model=out_schema, name=f'get_{name}')
    router.add_api_route(
        f'/{path}',
        create_record,
        methods=['POST'],
        response_model=out_schema,
        status_code=status.HTTP_201_CREATED,
        name=f'create_{name}',
    )
    router.add_api_route(
        f'/{path}/{{record_id}}', update_record, methods=['PUT', 'PATCH'], response_model=out_schema, name=f'update_{name}'
    )
    router.add_api_route(
        f'/{path}/{{record_id}}',
        delete_record,
        methods=['DELETE'],
        status_code=status.HTTP_204_NO_CONTENT,
        name=f'delete_{name}',
    )


_register('staff', personnel_service.STAFF, StaffCreate, StaffUpdate, StaffOut)
_register('subcontractors', personnel_service.SUBCONTRACTOR, SubcontractorCreate, SubcontractorUpdate, SubcontractorOut)
_register('suppliers', personnel_service.SUPPLIER, SupplierCreate, SupplierUpdate, SupplierOut)
