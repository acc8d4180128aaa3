from sqlalchemy import Column, Enum, Float, ForeignKey, Integer, Table, Text, UniqueConstraint, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Stores(Base):
    __tablename__ = 'stores'

    name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    location = Column(Text)
    opening_time = Column(Text)   # "HH:MM" or "HH:MM:SS"
    closing_time = Column(Text)
    working_days = Column(Text)   # JSON list or comma separated names
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    branches = relationship('Branches', back_populates='store')
    services = relationship('Services', back_populates='store')
    staff = relationship('Staff', back_populates='store')


class Branches(Base):
    __tablename__ = 'branches'

    store_id = Column(ForeignKey('stores.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    store = relationship('Stores', back_populates='branches')


class Services(Base):
    __tablename__ = 'services'

    store_id = Column(ForeignKey('stores.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    duration = Column(Integer, nullable=False, server_default=text('60'))
    buffer_time = Column(Integer, nullable=False, server_default=text('0'))
    max_concurrent_bookings = Column(Integer, nullable=False, server_default=text('1'))
    min_advance_booking = Column(Integer, server_default=text('30'))
    max_advance_booking = Column(Integer, server_default=text('10080'))
    status = Column(Enum('active', 'inactive', 'suspended'), nullable=False, server_default=text("'active'"))
    booking_enabled = Column(Integer, nullable=False, server_default=text('1'))
    auto_confirm_bookings = Column(Integer, nullable=False, server_default=text('1'))
    price = Column(Float)
    description = Column(Text)

    store = relationship('Stores', back_populates='services')
    offers = relationship('Offers', back_populates='service')
    bookings = relationship('Bookings', back_populates='service')


class Offers(Base):
    __tablename__ = 'offers'

    service_id = Column(ForeignKey('services.id', ondelete='CASCADE'), nullable=False)
    title = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    discount = Column(Float, nullable=False, server_default=text('0'))
    status = Column(Enum('active', 'expired', 'paused'), nullable=False, server_default=text("'active'"))
    expiration_date = Column(Text)  # "YYYY-MM-DD" or full timestamp

    service = relationship('Services', back_populates='offers')
    bookings = relationship('Bookings', back_populates='offer')


class Staff(Base):
    __tablename__ = 'staff'

    store_id = Column(ForeignKey('stores.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    branch_id = Column(ForeignKey('branches.id', ondelete='SET NULL'))
    email = Column(Text)
    status = Column(Enum('active', 'inactive'), nullable=False, server_default=text("'active'"))

    store = relationship('Stores', back_populates='staff')
    bookings = relationship('Bookings', back_populates='staff')


t_staff_services = Table(
    'staff_services', metadata,
    Column('staff_id', ForeignKey('staff.id', ondelete='CASCADE'), nullable=False),
    Column('service_id', ForeignKey('services.id', ondelete='CASCADE'), nullable=False),
    Column('is_active', Integer, nullable=False, server_default=text('1')),
    UniqueConstraint('staff_id', 'service_id')
)


class Users(Base):
    __tablename__ = 'users'

    first_name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    last_name = Column(Text)
    email = Column(Text)
    phone = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    bookings = relationship('Bookings', back_populates='user')


class Bookings(Base):
    __tablename__ = 'bookings'

    user_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    store_id = Column(ForeignKey('stores.id'), nullable=False)
    service_id = Column(ForeignKey('services.id'), nullable=False)  # set for offer bookings too
    start_time = Column(Text, nullable=False)  # "YYYY-MM-DD HH:MM:SS"
    end_time = Column(Text, nullable=False)
    booking_type = Column(Enum('offer', 'service'), nullable=False, server_default=text("'service'"))
    status = Column(
        Enum('pending', 'confirmed', 'in_progress', 'completed', 'cancelled', 'no_show'),
        nullable=False,
        server_default=text("'pending'"),
    )
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    id = Column(Integer, primary_key=True)
    offer_id = Column(ForeignKey('offers.id'))
    branch_id = Column(ForeignKey('branches.id'))
    staff_id = Column(ForeignKey('staff.id', ondelete='SET NULL'))
    notes = Column(Text)
    cancel_reason = Column(Text)

    user = relationship('Users', back_populates='bookings')
    service = relationship('Services', back_populates='bookings')
    offer = relationship('Offers', back_populates='bookings')
    staff = relationship('Staff', back_populates='bookings')
