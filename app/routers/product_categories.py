from datetime import datetime
from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.models.database import get_db
from app.models.product_category import ProductCategory
from app.models.product import Product
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.common import OperationResult
from app.schemas.product_category import (
    CategoryCreate,
    CategoryDetailResponse,
    CategoryListResponse,
    CategoryUpdate,
)
from app.dependencies import require_admin
from app.utils.errors import (
    Conflict,
    Internal,
    NotFound,
    ValidationError,
    translate_integrity_error,
)
from app.utils.validation import clean_text

router = APIRouter(prefix="/categorias", tags=["Categorías de Producto"])

DUPLICATE_NAME = "Ya existe una categoría con este nombre"


def _get_category_or_404(db: Session, id: int) -> ProductCategory:
    try:
        categoria = db.get(ProductCategory, id)
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    if not categoria:
        raise NotFound("Categoría no encontrada")
    return categoria


@router.get("/", response_model=CategoryListResponse)
def list_categories(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Todos los usuarios autenticados pueden ver las categorías."""
    try:
        categorias = db.exec(
            select(ProductCategory).order_by(ProductCategory.nombre)
        ).all()
    except SQLAlchemyError:
        raise Internal("Error al obtener las categorías")
    return {"categorias": categorias}


@router.get("/{id}", response_model=CategoryDetailResponse)
def get_category(
    id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"categoria": _get_category_or_404(db, id)}


@router.post("/", response_model=CategoryDetailResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    data: CategoryCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    nombre = clean_text(data.nombre)
    if not nombre:
        raise ValidationError("El nombre de la categoría es requerido")

    categoria = ProductCategory(
        nombre=nombre,
        descripcion=clean_text(data.descripcion),
        activo=data.activo,
    )

    try:
        db.add(categoria)
        db.commit()
        db.refresh(categoria)
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, unique_message=DUPLICATE_NAME)
    except SQLAlchemyError:
        db.rollback()
        raise Internal("Error interno al crear la categoría")

    return {"categoria": categoria}


@router.put("/{id}", response_model=CategoryDetailResponse)
def update_category(
    id: int,
    data: CategoryUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    nombre = clean_text(data.nombre)
    if not nombre:
        raise ValidationError("El nombre de la categoría es requerido")

    categoria = _get_category_or_404(db, id)
    categoria.nombre = nombre
    categoria.descripcion = clean_text(data.descripcion)
    if data.activo is not None:
        categoria.activo = data.activo
    categoria.fecha_actualizacion = datetime.now()

    try:
        db.add(categoria)
        db.commit()
        db.refresh(categoria)
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, unique_message=DUPLICATE_NAME)
    except SQLAlchemyError:
        db.rollback()
        raise Internal("Error al actualizar la categoría")

    return {"categoria": categoria}


@router.delete("/{id}", response_model=OperationResult)
def delete_category(
    id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    categoria = _get_category_or_404(db, id)

    # Validar que no haya productos asociados
    try:
        producto = db.exec(select(Product.id_producto).where(Product.categoria_id == id)).first()
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    if producto is not None:
        raise Conflict(
            "No se puede eliminar la categoría porque tiene productos asociados"
        )

    try:
        db.delete(categoria)
        db.commit()
    except IntegrityError:
        # Un producto creado entre la comprobación y el borrado
        db.rollback()
        raise Conflict(
            "No se puede eliminar la categoría porque tiene productos asociados"
        )
    except SQLAlchemyError:
        db.rollback()
        raise Internal("Error al eliminar la categoría")

    return {"success": True, "message": "Categoría eliminada correctamente"}
