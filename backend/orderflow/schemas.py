"""Pydantic schemas for request/response bodies."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import CHECKLIST_ITEMS, JenisAktivitas, JenisPembiayaan
from .services.calculator import SimulationMode
from .services.workflow import OrderStatus, SlikResult, UserRole, WorkflowAction

# --- users -----------------------------------------------------------------


class UserBase(BaseModel):
    username: str = Field(..., max_length=64)
    nama_lengkap: str = Field(..., max_length=120, description="Nama lengkap")
    role: UserRole
    no_hp: Optional[str] = Field(None, max_length=32)
    merk: Optional[str] = Field(None, max_length=64)
    dealer: Optional[str] = Field(None, max_length=120)
    jabatan: Optional[str] = Field(None, max_length=64)
    cmh_id: Optional[int] = None
    spv_id: Optional[int] = None
    is_active: bool = True


class UserCreate(UserBase):
    pass


class UserUpdate(BaseModel):
    nama_lengkap: Optional[str] = Field(None, max_length=120)
    role: Optional[UserRole] = None
    no_hp: Optional[str] = Field(None, max_length=32)
    merk: Optional[str] = Field(None, max_length=64)
    dealer: Optional[str] = Field(None, max_length=120)
    jabatan: Optional[str] = Field(None, max_length=64)
    cmh_id: Optional[int] = None
    spv_id: Optional[int] = None
    is_active: Optional[bool] = None


class UserOut(UserBase):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- dealers ---------------------------------------------------------------


class DealerBase(BaseModel):
    kode_dealer: str = Field(..., max_length=32, description="Kode dealer")
    merk: str = Field(..., max_length=64)
    nama_dealer: str = Field(..., max_length=120)
    alamat: Optional[str] = None
    no_telp: Optional[str] = Field(None, max_length=32)
    is_active: bool = True


class DealerCreate(DealerBase):
    pass


class DealerUpdate(BaseModel):
    merk: Optional[str] = Field(None, max_length=64)
    nama_dealer: Optional[str] = Field(None, max_length=120)
    alamat: Optional[str] = None
    no_telp: Optional[str] = Field(None, max_length=32)
    is_active: Optional[bool] = None


class DealerOut(DealerBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


# --- programs --------------------------------------------------------------


class TenorBunga(BaseModel):
    tenor: int = Field(..., gt=0, description="Tenor (bulan)")
    bunga: float = Field(..., ge=0, description="Bunga per tahun (%)")
    is_active: Optional[bool] = True

    model_config = ConfigDict(from_attributes=True)


class ProgramBase(BaseModel):
    nama_program: str = Field(..., max_length=120)
    jenis_pembiayaan: JenisPembiayaan
    merk: str = Field(..., max_length=64)
    tdp_persen: float = Field(0, ge=0, le=100, description="TDP minimum (% dari OTR)")
    tenor_bunga: List[TenorBunga] = Field(default_factory=list)
    is_active: bool = True


class ProgramCreate(ProgramBase):
    pass


class ProgramUpdate(BaseModel):
    nama_program: Optional[str] = Field(None, max_length=120)
    jenis_pembiayaan: Optional[JenisPembiayaan] = None
    merk: Optional[str] = Field(None, max_length=64)
    tdp_persen: Optional[float] = Field(None, ge=0, le=100)
    tenor_bunga: Optional[List[TenorBunga]] = None
    is_active: Optional[bool] = None


class ProgramOut(ProgramBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


# --- orders ----------------------------------------------------------------


class OrderNoteOut(BaseModel):
    id: int
    user_id: str
    user_name: str
    role: UserRole
    note: str
    status: OrderStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderCreate(BaseModel):
    nama_nasabah: str = Field(..., min_length=1, max_length=120, description="Nama nasabah")
    no_hp: str = Field(..., min_length=1, max_length=32)
    nama_pasangan: Optional[str] = Field(None, max_length=120)
    foto_ktp_nasabah: Optional[str] = None
    foto_ktp_pasangan: Optional[str] = None
    foto_kk: Optional[str] = None
    type_unit: str = Field(..., min_length=1, max_length=120)
    merk: str = Field(..., max_length=64)
    dealer: str = Field(..., max_length=120)
    jenis_pembiayaan: JenisPembiayaan
    nama_program: str = Field(..., max_length=120)
    otr: int = Field(..., gt=0)
    tdp: int = Field(..., ge=0)
    tenor: int = Field(..., gt=0)
    cmo_id: Optional[str] = Field(None, max_length=64)
    cmo_name: Optional[str] = Field(None, max_length=120)
    catatan_khusus: Optional[str] = None


class OrderOut(BaseModel):
    id: int
    sales_id: str
    sales_name: str
    nama_nasabah: str
    no_hp: str
    nama_pasangan: Optional[str] = None
    type_unit: str
    merk: str
    dealer: str
    jenis_pembiayaan: str
    nama_program: str
    otr: int
    tdp: int
    angsuran: int
    tenor: int
    cmo_id: Optional[str] = None
    cmo_name: Optional[str] = None
    claimed_by: Optional[str] = None
    claimed_at: Optional[datetime] = None
    status: OrderStatus
    catatan_khusus: Optional[str] = None
    hasil_slik: Optional[str] = None
    decision_reason: Optional[str] = None
    tanggal_survey: Optional[str] = None
    checklist: Optional[Dict[str, bool]] = None
    foto_survey: Optional[List[str]] = None
    created_at: datetime
    updated_at: datetime
    notes: List[OrderNoteOut] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class PaginatedOrders(BaseModel):
    total: int
    items: List[OrderOut]


class OrderActionIn(BaseModel):
    action: WorkflowAction
    note: Optional[str] = Field(None, description="Catatan / alasan keputusan")
    hasil_slik: Optional[SlikResult] = None
    tanggal_survey: Optional[str] = None
    checklist: Optional[Dict[str, bool]] = None
    foto_survey: Optional[List[str]] = None

    @field_validator("checklist")
    @classmethod
    def known_checklist_items(cls, value):
        if value is None:
            return value
        unknown = sorted(set(value) - set(CHECKLIST_ITEMS))
        if unknown:
            raise ValueError(f"Item checklist tidak dikenal: {', '.join(unknown)}")
        return {item: bool(value.get(item, False)) for item in CHECKLIST_ITEMS}


class OrderNoteIn(BaseModel):
    note: str = Field(..., min_length=1)


class OrderStats(BaseModel):
    total: int
    by_status: Dict[str, int]


# --- simulations -----------------------------------------------------------


class SimulationIn(BaseModel):
    program_id: Optional[int] = None
    nama_program: Optional[str] = None
    otr: int = Field(..., gt=0)
    mode: SimulationMode
    tdp: Optional[int] = Field(None, ge=0)
    angsuran: Optional[int] = Field(None, ge=0)
    merk: Optional[str] = None
    dealer: Optional[str] = None
    cmo_id: Optional[str] = None
    cmo_name: Optional[str] = None


class SimulationRowOut(BaseModel):
    tenor: int
    down_payment: int
    installment: int
    rate: float
    total_payment: int


class SimulationResult(BaseModel):
    nama_program: str
    otr: int
    mode: SimulationMode
    minimum_tdp: int
    results: List[SimulationRowOut]


class SimulasiOut(BaseModel):
    id: int
    user_id: str
    user_name: str
    merk: Optional[str] = None
    dealer: Optional[str] = None
    jenis_pembiayaan: Optional[str] = None
    nama_program: str
    otr: int
    mode: SimulationMode
    tdp: Optional[int] = None
    angsuran: Optional[int] = None
    cmo_id: Optional[str] = None
    cmo_name: Optional[str] = None
    hasil_simulasi: List[SimulationRowOut]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- notifications ---------------------------------------------------------


class NotificationOut(BaseModel):
    id: int
    user_id: str
    title: str
    message: str
    type: str
    reference_id: Optional[str] = None
    is_read: bool
    created_by_id: Optional[str] = None
    created_by_name: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UnreadCount(BaseModel):
    user_id: str
    unread: int


# --- aktivitas -------------------------------------------------------------


class AktivitasCreate(BaseModel):
    jenis_aktivitas: JenisAktivitas
    tanggal: str
    pic_dealer: str = Field(..., max_length=120)
    dealer: str = Field(..., max_length=120)
    foto_aktivitas: List[str] = Field(default_factory=list)


class AktivitasOut(AktivitasCreate):
    id: int
    user_id: str
    user_name: str
    role: UserRole
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
