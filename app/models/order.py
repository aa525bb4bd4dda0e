# app/models/order.py
from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship
from app.db.session import Base

class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    # Гостевые заказы оформляются без пользователя
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    customer_email = Column(String, nullable=False)

    # Список позиций [{name, price, qty}], после создания не меняется
    items = Column(JSON, nullable=False)
    subtotal = Column(Float, nullable=False)
    credits_used = Column(Float, default=0, nullable=False, server_default='0')
    total = Column(Float, nullable=False)

    homework_email = Column(String, nullable=True)
    # Пароль хранится только в зашифрованном виде (Fernet)
    homework_password_encrypted = Column(Text, nullable=True)

    stripe_session_id = Column(String, unique=True, index=True, nullable=True)

    # 'pending', 'processing', 'completed', 'cancelled', 'refunded'
    status = Column(String, default="pending", nullable=False, server_default='pending', index=True)

    discount_code = Column(String, nullable=True)
    discount_amount = Column(Float, default=0, nullable=False, server_default='0')

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="orders")
