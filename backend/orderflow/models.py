"""SQLAlchemy models."""

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship, validates

from .database import Base
from .services.workflow import ORDER_STATUSES, OrderStatus, UserRole

USER_ROLES = {role.value for role in UserRole}


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(64), nullable=False, unique=True, index=True)
    nama_lengkap = Column(String(120), nullable=False)
    role = Column(String(16), nullable=False, index=True)
    no_hp = Column(String(32), nullable=True)
    merk = Column(String(64), nullable=True)
    dealer = Column(String(120), nullable=True)
    jabatan = Column(String(64), nullable=True)
    cmh_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    spv_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @validates("role")
    def _validate_role(self, _key, value):
        value = getattr(value, "value", value)
        if value not in USER_ROLES:
            raise ValueError(f"Role tidak dikenal: {value!r}")
        return value


class Dealer(Base):
    __tablename__ = "dealers"

    id = Column(Integer, primary_key=True, index=True)
    kode_dealer = Column(String(32), nullable=False, unique=True, index=True)
    merk = Column(String(64), nullable=False, index=True)
    nama_dealer = Column(String(120), nullable=False)
    alamat = Column(Text, nullable=True)
    no_telp = Column(String(32), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Program(Base):
    __tablename__ = "programs"

    id = Column(Integer, primary_key=True, index=True)
    nama_program = Column(String(120), nullable=False, unique=True, index=True)
    jenis_pembiayaan = Column(String(32), nullable=False)
    merk = Column(String(64), nullable=False, index=True)
    tdp_persen = Column(Float, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    tenor_bunga = relationship(
        "ProgramTenor",
        back_populates="program",
        cascade="all, delete-orphan",
        order_by="ProgramTenor.tenor",
    )


class ProgramTenor(Base):
    __tablename__ = "program_tenors"

    id = Column(Integer, primary_key=True)
    program_id = Column(Integer, ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    tenor = Column(Integer, nullable=False)
    bunga = Column(Float, nullable=False)
    is_active = Column(Boolean, nullable=True, default=True)

    program = relationship("Program", back_populates="tenor_bunga")

    @property
    def rate(self) -> float:
        return self.bunga


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    sales_id = Column(String(64), nullable=False, index=True)
    sales_name = Column(String(120), nullable=False)
    nama_nasabah = Column(String(120), nullable=False, index=True)
    no_hp = Column(String(32), nullable=False)
    nama_pasangan = Column(String(120), nullable=True)
    foto_ktp_nasabah = Column(Text, nullable=True)
    foto_ktp_pasangan = Column(Text, nullable=True)
    foto_kk = Column(Text, nullable=True)

    type_unit = Column(String(120), nullable=False)
    merk = Column(String(64), nullable=False)
    dealer = Column(String(120), nullable=False)
    jenis_pembiayaan = Column(String(32), nullable=False)
    # Snapshot by value: later edits to the program are not reflected here.
    nama_program = Column(String(120), nullable=False)
    otr = Column(BigInteger, nullable=False)
    tdp = Column(BigInteger, nullable=False)
    angsuran = Column(BigInteger, nullable=False)
    tenor = Column(Integer, nullable=False)

    cmo_id = Column(String(64), nullable=True, index=True)
    cmo_name = Column(String(120), nullable=True)
    claimed_by = Column(String(64), nullable=True)
    claimed_at = Column(DateTime(timezone=True), nullable=True)

    status = Column(String(32), nullable=False, default=OrderStatus.BARU.value, index=True)
    catatan_khusus = Column(Text, nullable=True)
    hasil_slik = Column(String(32), nullable=True)
    decision_reason = Column(Text, nullable=True)
    tanggal_survey = Column(String(32), nullable=True)
    checklist = Column(JSON, nullable=True)
    foto_survey = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    notes = relationship(
        "OrderNote",
        back_populates="order",
        order_by="OrderNote.id",
        cascade="all, delete-orphan",
    )

    @validates("status")
    def _validate_status(self, _key, value):
        value = getattr(value, "value", value)
        if value not in ORDER_STATUSES:
            raise ValueError(f"Status order tidak dikenal: {value!r}")
        return value

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Order id={self.id} nasabah={self.nama_nasabah!r} status={self.status}>"


class OrderNote(Base):
    """Audit entry on an order. Written once, never updated or deleted."""

    __tablename__ = "order_notes"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False)
    user_name = Column(String(120), nullable=False)
    role = Column(String(16), nullable=False)
    note = Column(Text, nullable=False)
    status = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    order = relationship("Order", back_populates="notes")


class SimulasiKredit(Base):
    __tablename__ = "simulasi_kredit"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    user_name = Column(String(120), nullable=False)
    merk = Column(String(64), nullable=True)
    dealer = Column(String(120), nullable=True)
    jenis_pembiayaan = Column(String(32), nullable=True)
    nama_program = Column(String(120), nullable=False)
    otr = Column(BigInteger, nullable=False)
    mode = Column(String(16), nullable=False)
    tdp = Column(BigInteger, nullable=True)
    angsuran = Column(BigInteger, nullable=True)
    cmo_id = Column(String(64), nullable=True)
    cmo_name = Column(String(120), nullable=True)
    hasil_simulasi = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    title = Column(String(120), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(32), nullable=False)
    reference_id = Column(String(64), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_by_id = Column(String(64), nullable=True)
    created_by_name = Column(String(120), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Aktivitas(Base):
    __tablename__ = "aktivitas"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    user_name = Column(String(120), nullable=False)
    role = Column(String(16), nullable=False)
    jenis_aktivitas = Column(String(32), nullable=False)
    tanggal = Column(String(32), nullable=False)
    pic_dealer = Column(String(120), nullable=False)
    dealer = Column(String(120), nullable=False)
    foto_aktivitas = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
