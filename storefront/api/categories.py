from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from storefront.api.deps import get_db
from storefront.core.auth import require_admin
from storefront.db.models import Category, Product
from storefront.schemas import CategoryCreate, CategoryRead, ProductRead

router = APIRouter()

def _get_or_404(db: Session, category_id: int) -> Category:
    obj = db.get(Category, category_id)
    if not obj: raise HTTPException(status_code=404, detail='Category not found')
    return obj

@router.get('/', response_model=List[CategoryRead])
def list_categories(db: Session = Depends(get_db)):
    return db.query(Category).order_by(Category.name).all()

@router.get('/{category_id}', response_model=CategoryRead)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return _get_or_404(db, category_id)

@router.get('/{category_id}/products', response_model=List[ProductRead])
def category_products(category_id: int, db: Session = Depends(get_db)):
    # storefront view: retired products stay hidden
    _get_or_404(db, category_id)
    return (db.query(Product)
            .filter(Product.category_id == category_id, Product.active.is_(True))
            .order_by(Product.id).all())

@router.post('/', response_model=CategoryRead, status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db), _=Depends(require_admin)):
    if db.query(Category).filter(Category.name == payload.name).first():
        raise HTTPException(status_code=409, detail='Category already exists')
    category = Category(name=payload.name)
    db.add(category); db.commit(); db.refresh(category)
    return category
