from datetime import date, datetime
from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.models.database import get_db
from app.models.lot import Lot
from app.models.product import Product
from app.models.product_category import ProductCategory
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.common import OperationResult
from app.schemas.lot import LotResponse, ProductWithLotsDetailResponse
from app.schemas.product import (
    ProductCreate,
    ProductDetailResponse,
    ProductListResponse,
    ProductResponse,
    ProductSummary,
    ProductUpdate,
)
from app.schemas.product_category import CategoryResponse
from app.schemas.stock import StockViewResponse
from app.schemas.user import UsuarioResumen
from app.utils.errors import (
    Conflict,
    Internal,
    NotFound,
    ValidationError,
    translate_integrity_error,
)
from app.utils.validation import clean_text, expiry_status

router = APIRouter(prefix="/productos", tags=["Productos"])

DUPLICATE_CODE = "El código del producto ya existe"


def product_response(
    product: Product,
    categoria: Optional[ProductCategory] = None,
    usuario: Optional[User] = None,
) -> ProductResponse:
    return ProductResponse(
        **ProductSummary.model_validate(product).model_dump(),
        categoria=CategoryResponse.model_validate(categoria) if categoria else None,
        usuario=UsuarioResumen.model_validate(usuario) if usuario else None,
    )


def category_exists(db: Session, categoria_id: int) -> bool:
    try:
        return db.get(ProductCategory, categoria_id) is not None
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")


def _products_statement():
    return (
        select(Product, ProductCategory, User)
        .outerjoin(ProductCategory, ProductCategory.id_categoria == Product.categoria_id)
        .outerjoin(User, User.id_usuario == Product.id_usuario_creador)
    )


def _load_product(db: Session, id: int) -> ProductResponse:
    try:
        row = db.exec(_products_statement().where(Product.id_producto == id)).first()
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    if not row:
        raise NotFound("Producto no encontrado")
    return product_response(*row)


@router.get("/", response_model=ProductListResponse)
def list_products(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Lista todos los productos, los más recientes primero."""
    try:
        rows = db.exec(
            _products_statement().order_by(
                Product.fecha_creacion.desc(), Product.id_producto.desc()
            )
        ).all()
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    return {"productos": [product_response(*row) for row in rows]}


@router.get("/inventario/stock", response_model=StockViewResponse)
def get_stock_view(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Inventario: una fila por cada lote con stock de un producto activo.
    - `estado_vencimiento`: vencido / por_vencer (≤ 30 días) / vigente.
    - Los lotes agotados (stock 0) no aparecen.
    """
    try:
        rows = db.exec(
            select(Product, ProductCategory, Lot)
            .join(Lot, Lot.id_producto == Product.id_producto)
            .outerjoin(
                ProductCategory, ProductCategory.id_categoria == Product.categoria_id
            )
            .where(Product.activo == True)
            .where(Lot.stock_actual > 0)
            .order_by(Product.nombre_articulo, Lot.fecha_vencimiento)
        ).all()
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")

    today = date.today()
    productos = []
    for producto, categoria, lote in rows:
        productos.append(
            {
                # Información del producto
                "id": producto.id_producto,
                "codigo": producto.codigo,
                "nombre": producto.nombre_articulo,
                "categoria_id": producto.categoria_id,
                "categoria": (
                    {
                        "id": categoria.id_categoria,
                        "nombre": categoria.nombre,
                        "descripcion": categoria.descripcion,
                    }
                    if categoria
                    else None
                ),
                # Información del lote
                "lote": lote.numero_lote,
                "fecha_vencimiento": lote.fecha_vencimiento,
                "unidad_medida": "unidades",
                "stock_actual": lote.stock_actual,
                "estado_vencimiento": expiry_status(lote.fecha_vencimiento, today),
                "id_lote": lote.id_lote,
                "cantidad_inicial": lote.cantidad_inicial,
                "estado_lote": lote.estado,
            }
        )

    return {"productos": productos}


@router.get("/{id}", response_model=ProductWithLotsDetailResponse)
def get_product(
    id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Obtiene un producto con su categoría y sus lotes."""
    producto = _load_product(db, id)
    try:
        lotes = db.exec(
            select(Lot).where(Lot.id_producto == id).order_by(Lot.fecha_vencimiento)
        ).all()
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")

    return {
        "producto": {
            **producto.model_dump(),
            "lotes": [LotResponse.model_validate(lote) for lote in lotes],
        }
    }


@router.post("/", response_model=ProductDetailResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    data: ProductCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    codigo = clean_text(data.codigo)
    nombre = clean_text(data.nombre_articulo)
    if not codigo or not nombre or not data.categoria_id:
        raise ValidationError("Código, nombre y categoría son requeridos")

    if not category_exists(db, data.categoria_id):
        raise ValidationError("La categoría no existe")

    producto = Product(
        codigo=codigo,
        nombre_articulo=nombre,
        descripcion=clean_text(data.descripcion),
        activo=data.activo,
        categoria_id=data.categoria_id,
        id_usuario_creador=current_user.id_usuario,
    )

    try:
        db.add(producto)
        db.commit()
        db.refresh(producto)
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(
            e, unique_message=DUPLICATE_CODE, foreign_key_message="La categoría no existe"
        )
    except SQLAlchemyError:
        db.rollback()
        raise Internal("Error interno al crear el producto")

    return {"producto": _load_product(db, producto.id_producto)}


@router.put("/{id}", response_model=ProductDetailResponse)
def update_product(
    id: int,
    data: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Actualiza solo los campos enviados. La categoría se valida si cambia."""
    try:
        producto = db.get(Product, id)
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    if not producto:
        raise NotFound("Producto no encontrado")

    if data.categoria_id is not None:
        if not category_exists(db, data.categoria_id):
            raise ValidationError("La categoría no existe")
        producto.categoria_id = data.categoria_id

    if data.codigo is not None:
        codigo = clean_text(data.codigo)
        if not codigo:
            raise ValidationError("El código del producto no puede estar vacío")
        producto.codigo = codigo

    if data.nombre_articulo is not None:
        nombre = clean_text(data.nombre_articulo)
        if not nombre:
            raise ValidationError("El nombre del producto no puede estar vacío")
        producto.nombre_articulo = nombre

    if data.descripcion is not None:
        producto.descripcion = clean_text(data.descripcion)

    if data.activo is not None:
        producto.activo = data.activo

    producto.fecha_actualizacion = datetime.now()

    try:
        db.add(producto)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(
            e, unique_message=DUPLICATE_CODE, foreign_key_message="La categoría no existe"
        )
    except SQLAlchemyError:
        db.rollback()
        raise Internal("Error al actualizar el producto")

    return {"producto": _load_product(db, id)}


@router.delete("/{id}", response_model=OperationResult)
def delete_product(
    id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Elimina un producto siempre que no tenga lotes."""
    try:
        producto = db.get(Product, id)
        lote = db.exec(select(Lot.id_lote).where(Lot.id_producto == id)).first()
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")

    if not producto:
        raise NotFound("Producto no encontrado")
    if lote is not None:
        raise Conflict("No se puede eliminar el producto porque tiene lotes asociados")

    try:
        db.delete(producto)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("No se puede eliminar el producto porque tiene lotes asociados")
    except SQLAlchemyError:
        db.rollback()
        raise Internal("Error al eliminar el producto")

    return {"success": True, "message": "Producto eliminado correctamente"}
