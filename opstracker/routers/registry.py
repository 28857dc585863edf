"""
Engineer and service registry endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from opstracker.database import get_db
from opstracker.models import Engineer, Service
from opstracker.schemas import EngineerCreate, EngineerResponse, ServiceCreate, ServiceResponse
from opstracker.services.registry import ENGINEER_COLORS

engineers_router = APIRouter(prefix="/engineers", tags=["engineers"])
services_router = APIRouter(prefix="/services", tags=["services"])


@engineers_router.get("", response_model=List[EngineerResponse])
async def list_engineers(db: Session = Depends(get_db)):
    return db.query(Engineer).order_by(Engineer.name).all()


@engineers_router.post("", response_model=EngineerResponse, status_code=201)
async def create_engineer(data: EngineerCreate, db: Session = Depends(get_db)):
    name = data.name.strip()
    if db.query(Engineer).filter(Engineer.name == name).first():
        raise HTTPException(status_code=409, detail="Engineer with this name already exists")

    color = data.color or ENGINEER_COLORS[db.query(Engineer).count() % len(ENGINEER_COLORS)]
    engineer = Engineer(name=name, color=color, tasks_total=0)
    db.add(engineer)
    db.commit()
    db.refresh(engineer)
    return engineer


@services_router.get("", response_model=List[ServiceResponse])
async def list_services(db: Session = Depends(get_db)):
    return db.query(Service).order_by(Service.category, Service.name).all()


@services_router.post("", response_model=ServiceResponse, status_code=201)
async def create_service(data: ServiceCreate, db: Session = Depends(get_db)):
    name = data.name.strip()
    if db.query(Service).filter(Service.name == name).first():
        raise HTTPException(status_code=409, detail="Service with this name already exists")

    service = Service(name=name, category=data.category, assigned_to=data.assigned_to, count=0)
    db.add(service)
    db.commit()
    db.refresh(service)
    return service
