from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from storefront.api.deps import get_db
from storefront.core.auth import require_admin
from storefront.schemas import StockItemsReq
from storefront.services import inventory

router = APIRouter()

@router.post("/v1/inventory/restock")
def restock(req: StockItemsReq, db: Session = Depends(get_db), _=Depends(require_admin)):
    for it in req.items:
        if not inventory.restock(db, it.product_id, it.qty):
            db.rollback()
            raise HTTPException(status_code=404, detail=f"Product {it.product_id} not found")
    db.commit()
    return {"status": "restocked"}
