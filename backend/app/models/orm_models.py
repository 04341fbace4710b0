"""ORM Models for the Joinery Estimator — SQLAlchemy 2.0"""
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import (
    String, Text, Integer, Numeric, DateTime,
    ForeignKey, Index, CheckConstraint
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from app.db import Base


def gen_uuid():
    return str(uuid.uuid4())


# ── SETTINGS ─────────────────────────────────────────────────────────────────
# Key/value strings; pricing reads cut_and_edge_cost_per_sheet from here.
class Setting(Base):
    __tablename__ = "settings"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


# ── SUPPLIERS ────────────────────────────────────────────────────────────────
class Supplier(Base):
    __tablename__ = "suppliers"
    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=gen_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    materials: Mapped[list["Material"]] = relationship("Material", back_populates="supplier")
    hardware: Mapped[list["Hardware"]] = relationship("Hardware", back_populates="supplier")


# ── MATERIALS LIBRARY ────────────────────────────────────────────────────────
class Material(Base):
    __tablename__ = "materials"
    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=gen_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    material_type: Mapped[Optional[str]] = mapped_column(String(50))  # "Board/Laminate" | "Edgetape"
    thickness: Mapped[Optional[float]] = mapped_column(Numeric(8, 2))
    length: Mapped[Optional[float]] = mapped_column(Numeric(10, 2))   # mm
    width: Mapped[Optional[float]] = mapped_column(Numeric(10, 2))    # mm
    edge_size: Mapped[Optional[str]] = mapped_column(String(10))      # Edgetape only, e.g. "21x1"
    unit: Mapped[Optional[str]] = mapped_column(String(20))           # sheet | meters | units
    cost_per_unit: Mapped[Optional[float]] = mapped_column(Numeric(12, 2))
    supplier_id: Mapped[Optional[str]] = mapped_column(UUID(as_uuid=False), ForeignKey("suppliers.id"))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    supplier: Mapped[Optional["Supplier"]] = relationship("Supplier", back_populates="materials")


class Hardware(Base):
    __tablename__ = "hardware"
    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=gen_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    dimension: Mapped[Optional[str]] = mapped_column(String(100))
    cost_per_unit: Mapped[Optional[float]] = mapped_column(Numeric(12, 2))
    supplier_id: Mapped[Optional[str]] = mapped_column(UUID(as_uuid=False), ForeignKey("suppliers.id"))
    supplier: Mapped[Optional["Supplier"]] = relationship("Supplier", back_populates="hardware")


# ── TEMPLATE CABINETS ────────────────────────────────────────────────────────
class TemplateCabinet(Base):
    __tablename__ = "template_cabinets"
    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=gen_uuid)
    name: Mapped[Optional[str]] = mapped_column(String(255))
    type: Mapped[Optional[str]] = mapped_column(String(50))
    category: Mapped[Optional[str]] = mapped_column(String(100))
    width: Mapped[Optional[float]] = mapped_column(Numeric(10, 2))
    height: Mapped[Optional[float]] = mapped_column(Numeric(10, 2))
    depth: Mapped[Optional[float]] = mapped_column(Numeric(10, 2))
    description: Mapped[Optional[str]] = mapped_column(Text)
    assigned_face_material: Mapped[int] = mapped_column(Integer, default=1)
    end_panels_qty: Mapped[int] = mapped_column(Integer, default=0)
    door_qty: Mapped[int] = mapped_column(Integer, default=0)
    drawer_qty: Mapped[int] = mapped_column(Integer, default=0)
    shelf_qty: Mapped[int] = mapped_column(Integer, default=0)
    # Formula strings, e.g. "door_qty*2", "(2 * depth * height) + (width * height)"
    hinge_qty: Mapped[Optional[str]] = mapped_column(Text)
    drawer_hardware_qty: Mapped[Optional[str]] = mapped_column(Text)
    carcass_calculation: Mapped[Optional[str]] = mapped_column(Text)
    face_calculation: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("assigned_face_material BETWEEN 1 AND 4", name="ck_template_face_slot"),
    )


# ── QUOTES ───────────────────────────────────────────────────────────────────
class Quote(Base):
    __tablename__ = "quotes"
    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=gen_uuid)
    quote_num: Mapped[Optional[str]] = mapped_column(String(50), unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[Optional[str]] = mapped_column(String(50), default="Draft")
    markup_percentage: Mapped[float] = mapped_column(Numeric(7, 2), default=40.0)
    # Cached grand total, rewritten by quote_recalculation
    total_amount: Mapped[float] = mapped_column(Numeric(14, 2), default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    joinery_items: Mapped[list["JoineryItem"]] = relationship(
        "JoineryItem", back_populates="quote", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("markup_percentage >= 0 AND markup_percentage <= 1000", name="ck_quote_markup_range"),
    )


class JoineryItem(Base):
    __tablename__ = "joinery_items"
    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=gen_uuid)
    quote_id: Mapped[str] = mapped_column(UUID(as_uuid=False), ForeignKey("quotes.id", ondelete="CASCADE"))
    joinery_number: Mapped[Optional[str]] = mapped_column(String(50))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    factory_hours: Mapped[Optional[float]] = mapped_column(Numeric(8, 2))
    install_hours: Mapped[Optional[float]] = mapped_column(Numeric(8, 2))
    carcass_material_id: Mapped[Optional[str]] = mapped_column(UUID(as_uuid=False), ForeignKey("materials.id"))
    face_material_1_id: Mapped[Optional[str]] = mapped_column(UUID(as_uuid=False), ForeignKey("materials.id"))
    face_material_2_id: Mapped[Optional[str]] = mapped_column(UUID(as_uuid=False), ForeignKey("materials.id"))
    face_material_3_id: Mapped[Optional[str]] = mapped_column(UUID(as_uuid=False), ForeignKey("materials.id"))
    face_material_4_id: Mapped[Optional[str]] = mapped_column(UUID(as_uuid=False), ForeignKey("materials.id"))
    hinge_id: Mapped[Optional[str]] = mapped_column(UUID(as_uuid=False), ForeignKey("hardware.id"))
    drawer_hardware_id: Mapped[Optional[str]] = mapped_column(UUID(as_uuid=False), ForeignKey("hardware.id"))
    # Cached costs, rewritten by quote_recalculation
    calculated_cabinet_cost: Mapped[Optional[float]] = mapped_column(Numeric(14, 2), default=0)
    calculated_specialized_cost: Mapped[Optional[float]] = mapped_column(Numeric(14, 2), default=0)
    calculated_hours_cost: Mapped[Optional[float]] = mapped_column(Numeric(14, 2), default=0)
    calculated_total_cost: Mapped[Optional[float]] = mapped_column(Numeric(14, 2), default=0)

    quote: Mapped["Quote"] = relationship("Quote", back_populates="joinery_items")
    carcass_material: Mapped[Optional["Material"]] = relationship("Material", foreign_keys=[carcass_material_id])
    face_material_1: Mapped[Optional["Material"]] = relationship("Material", foreign_keys=[face_material_1_id])
    face_material_2: Mapped[Optional["Material"]] = relationship("Material", foreign_keys=[face_material_2_id])
    face_material_3: Mapped[Optional["Material"]] = relationship("Material", foreign_keys=[face_material_3_id])
    face_material_4: Mapped[Optional["Material"]] = relationship("Material", foreign_keys=[face_material_4_id])
    hinge: Mapped[Optional["Hardware"]] = relationship("Hardware", foreign_keys=[hinge_id])
    drawer_hardware: Mapped[Optional["Hardware"]] = relationship("Hardware", foreign_keys=[drawer_hardware_id])
    cabinets: Mapped[list["Cabinet"]] = relationship(
        "Cabinet", back_populates="joinery_item", cascade="all, delete-orphan"
    )
    specialized_items: Mapped[list["SpecializedItem"]] = relationship(
        "SpecializedItem", back_populates="joinery_item", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("idx_joinery_items_quote", "quote_id"),)


class Cabinet(Base):
    __tablename__ = "cabinets"
    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=gen_uuid)
    joinery_item_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("joinery_items.id", ondelete="CASCADE")
    )
    template_id: Mapped[Optional[str]] = mapped_column(UUID(as_uuid=False), ForeignKey("template_cabinets.id"))
    name: Mapped[Optional[str]] = mapped_column(String(255))
    type: Mapped[Optional[str]] = mapped_column(String(50))
    category: Mapped[Optional[str]] = mapped_column(String(100))
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    width: Mapped[Optional[float]] = mapped_column(Numeric(10, 2))
    height: Mapped[Optional[float]] = mapped_column(Numeric(10, 2))
    depth: Mapped[Optional[float]] = mapped_column(Numeric(10, 2))
    door_qty: Mapped[Optional[int]] = mapped_column(Integer)
    drawer_qty: Mapped[Optional[int]] = mapped_column(Integer)
    shelf_qty: Mapped[Optional[int]] = mapped_column(Integer)
    end_panels_qty: Mapped[Optional[int]] = mapped_column(Integer)
    extra_hinges: Mapped[int] = mapped_column(Integer, default=0)
    extra_drawers: Mapped[int] = mapped_column(Integer, default=0)
    hinge_qty: Mapped[Optional[str]] = mapped_column(Text)
    drawer_hardware_qty: Mapped[Optional[str]] = mapped_column(Text)
    assigned_face_material: Mapped[Optional[int]] = mapped_column(Integer)

    joinery_item: Mapped["JoineryItem"] = relationship("JoineryItem", back_populates="cabinets")
    template: Mapped[Optional["TemplateCabinet"]] = relationship("TemplateCabinet")

    __table_args__ = (
        CheckConstraint(
            "assigned_face_material IS NULL OR assigned_face_material BETWEEN 1 AND 4",
            name="ck_cabinet_face_slot",
        ),
        CheckConstraint("quantity >= 0", name="ck_cabinet_quantity_nonneg"),
        Index("idx_cabinets_joinery_item", "joinery_item_id"),
    )


class SpecializedItem(Base):
    __tablename__ = "specialized_items"
    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=gen_uuid)
    joinery_item_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("joinery_items.id", ondelete="CASCADE")
    )
    item_type: Mapped[str] = mapped_column(String(20), nullable=False)  # "hardware" | "material"
    item_id: Mapped[Optional[str]] = mapped_column(UUID(as_uuid=False))
    quantity: Mapped[float] = mapped_column(Numeric(10, 2), default=0)
    unit_cost: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    total_cost: Mapped[Optional[float]] = mapped_column(Numeric(14, 2))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    joinery_item: Mapped["JoineryItem"] = relationship("JoineryItem", back_populates="specialized_items")

    __table_args__ = (
        CheckConstraint("item_type IN ('hardware', 'material')", name="ck_specialized_item_type"),
    )
