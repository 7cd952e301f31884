from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from sqlalchemy.orm import Session
from storefront.api.deps import get_db
from storefront.core.auth import Principal, get_current_principal
from storefront.schemas import OrderCreate, OrderRead, OrderList, OrderStats, StatusUpdate, PaymentResult
from storefront.services import orders as order_service

router = APIRouter()

@router.post("/v1/orders", response_model=OrderRead, status_code=201)
def create_order(payload: OrderCreate, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    return order_service.place_order(db, principal, payload)

@router.get("/v1/orders/mine", response_model=List[OrderRead])
def my_orders(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    return order_service.list_user_orders(db, principal)

@router.get("/v1/orders/stats", response_model=OrderStats)
def stats(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    return order_service.order_stats(db, principal)

@router.get("/v1/orders", response_model=OrderList)
def list_orders(
    status: Optional[str] = None,
    sort: str = "-created_at",
    limit: int = Query(default=10),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return {"orders": order_service.list_orders(db, principal, status=status, sort=sort, limit=limit)}

@router.get("/v1/orders/{order_id}", response_model=OrderRead)
def get_order(order_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    return order_service.get_order(db, principal, order_id)

@router.put("/v1/orders/{order_id}/status", response_model=OrderRead)
def update_status(order_id: int, payload: StatusUpdate, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    return order_service.update_status(db, principal, order_id, payload.status, payload.tracking_number)

@router.put("/v1/orders/{order_id}/deliver", response_model=OrderRead)
def mark_delivered(order_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    return order_service.mark_delivered(db, principal, order_id)

@router.put("/v1/orders/{order_id}/pay", response_model=OrderRead)
def mark_paid(order_id: int, payload: PaymentResult, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    return order_service.mark_paid(db, principal, order_id, payload)
