"""
Pricing input records for the joinery quote engine.

These mirror the rows owned by the CRUD layer. The engine only reads them;
every derived cost is recomputed from the current field values.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from app.services.pricing_config import DEFAULT_MARKUP_PERCENTAGE, MARKUP_MAX, MARKUP_MIN

FaceMaterialSlot = Literal[1, 2, 3, 4]


class Material(BaseModel):
    """Sheet good or edge tape from the materials library."""
    id: Optional[str] = None
    name: str = ""
    material_type: Optional[str] = Field(None, description="'Board/Laminate', 'Edgetape' or other")
    cost_per_unit: Optional[float] = Field(None, description="Purchase cost per sheet/unit")
    length_mm: Optional[float] = None
    width_mm: Optional[float] = None
    thickness_mm: Optional[float] = None
    supplier_id: Optional[str] = None


class Hardware(BaseModel):
    """Hinge, runner or other per-unit hardware SKU."""
    id: Optional[str] = None
    name: str = ""
    cost_per_unit: Optional[float] = None
    supplier_id: Optional[str] = None


class TemplateCabinet(BaseModel):
    """Catalog cabinet whose defaults are copied into cabinet instances."""
    id: Optional[str] = None
    name: Optional[str] = None
    category: Optional[str] = Field(None, description="e.g. Base, Wall, Tall")
    type: Optional[str] = Field(None, description="door, drawer, open, int_dishwasher, ...")
    width_mm: Optional[float] = None
    height_mm: Optional[float] = None
    depth_mm: Optional[float] = None
    door_qty: int = 0
    drawer_qty: int = 0
    shelf_qty: int = 0
    end_panels_qty: int = 0
    hinge_qty_formula: Optional[str] = Field(None, description="e.g. 'door_qty*2' or '4'")
    drawer_hardware_qty_formula: Optional[str] = Field(None, description="e.g. 'drawer_qty'")
    carcass_area_formula: Optional[str] = Field(None, description="Area in mm² over cabinet variables")
    face_area_formula: Optional[str] = None
    assigned_face_material: Optional[FaceMaterialSlot] = 1


class CabinetInstance(BaseModel):
    """
    Cabinet placed in a joinery item. Every ``None`` field falls back to the
    template value, then to zero.
    """
    id: Optional[str] = None
    template_id: Optional[str] = None
    template: Optional[TemplateCabinet] = None
    name: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None
    quantity: int = Field(1, ge=0)
    width_mm: Optional[float] = None
    height_mm: Optional[float] = None
    depth_mm: Optional[float] = None
    door_qty: Optional[int] = None
    drawer_qty: Optional[int] = None
    shelf_qty: Optional[int] = None
    end_panels_qty: Optional[int] = None
    extra_hinges: int = 0
    extra_drawers: int = 0
    hinge_qty_formula: Optional[str] = None
    drawer_hardware_qty_formula: Optional[str] = None
    assigned_face_material: Optional[FaceMaterialSlot] = None

    @classmethod
    def from_template(
        cls,
        template: TemplateCabinet,
        quantity: int = 1,
        width_mm: Optional[float] = None,
        height_mm: Optional[float] = None,
        depth_mm: Optional[float] = None,
    ) -> "CabinetInstance":
        """New instance copying the template's defaults, with optional custom dimensions."""
        return cls(
            template_id=template.id,
            template=template,
            name=template.name,
            category=template.category,
            type=template.type,
            quantity=quantity,
            width_mm=width_mm or template.width_mm,
            height_mm=height_mm or template.height_mm,
            depth_mm=depth_mm or template.depth_mm,
            door_qty=template.door_qty or 0,
            drawer_qty=template.drawer_qty or 0,
            shelf_qty=template.shelf_qty or 0,
            end_panels_qty=template.end_panels_qty or 0,
            extra_hinges=0,
            extra_drawers=0,
            hinge_qty_formula=template.hinge_qty_formula or None,
            drawer_hardware_qty_formula=template.drawer_hardware_qty_formula or None,
            assigned_face_material=template.assigned_face_material or 1,
        )


class SpecializedItem(BaseModel):
    """Flat-cost hardware or material line; no geometry involved."""
    id: Optional[str] = None
    item_type: Literal["hardware", "material"] = "hardware"
    item_id: Optional[str] = None
    quantity: float = 0.0
    unit_cost: float = 0.0
    total_cost: Optional[float] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _derive_total_cost(self) -> "SpecializedItem":
        if self.total_cost is None:
            self.total_cost = self.quantity * self.unit_cost
        return self


class JoineryItem(BaseModel):
    """
    Grouping of cabinets sharing one carcass material, up to four face
    materials and one hinge / drawer-hardware SKU.
    """
    id: Optional[str] = None
    name: str = ""
    carcass_material: Optional[Material] = None
    face_material_1: Optional[Material] = None
    face_material_2: Optional[Material] = None
    face_material_3: Optional[Material] = None
    face_material_4: Optional[Material] = None
    hinge: Optional[Hardware] = None
    drawer_hardware: Optional[Hardware] = None
    factory_hours: Optional[float] = None
    install_hours: Optional[float] = None
    cabinets: List[CabinetInstance] = Field(default_factory=list)
    specialized_items: List[SpecializedItem] = Field(default_factory=list)

    def face_material(self, slot: Optional[int]) -> Optional[Material]:
        """Face material in ``slot`` (1-4); anything else means no face material."""
        if slot == 1:
            return self.face_material_1
        if slot == 2:
            return self.face_material_2
        if slot == 3:
            return self.face_material_3
        if slot == 4:
            return self.face_material_4
        return None


class Quote(BaseModel):
    id: Optional[str] = None
    name: str = ""
    markup_percentage: float = Field(DEFAULT_MARKUP_PERCENTAGE, ge=MARKUP_MIN, le=MARKUP_MAX)
    joinery_items: List[JoineryItem] = Field(default_factory=list)
