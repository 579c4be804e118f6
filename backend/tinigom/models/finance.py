from sqlalchemy import Column, Integer, String, Float, DateTime, Boolean, Enum as SqEnum
import enum
from tinigom.database import Base
from tinigom.core.timeutils import utcnow


class Person(str, enum.Enum):
    NUONE = "Nuone"
    KATE = "Kate"


class TransactionType(str, enum.Enum):
    INCOME = "income"
    SAVINGS = "savings"
    WITHDRAWAL = "withdrawal"


class TodoAssignee(str, enum.Enum):
    N = "N"
    K = "K"


class Transaction(Base):
    __tablename__ = "transactions"
    id = Column(Integer, primary_key=True, index=True)
    amount = Column(Float, nullable=False)
    type = Column(SqEnum(TransactionType, values_callable=lambda e: [m.value for m in e]), nullable=False)
    category = Column(String, nullable=True)
    reason = Column(String, nullable=True)
    user = Column(SqEnum(Person, values_callable=lambda e: [m.value for m in e]), nullable=False, index=True)
    date = Column(DateTime, default=utcnow, nullable=False)  # when it happened
    created_at = Column(DateTime, default=utcnow)


class AppSettings(Base):
    """Singleton row (id = 1) holding the shared goal."""
    __tablename__ = "settings"
    id = Column(Integer, primary_key=True, default=1)
    savings_goal = Column(Float, nullable=False, default=150000)
    target_months = Column(Integer, nullable=True)
    target_start_date = Column(DateTime, nullable=True)
    last_invoice_number = Column(Integer, nullable=False, default=19)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class Todo(Base):
    __tablename__ = "todos"
    id = Column(Integer, primary_key=True, index=True)
    text = Column(String, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    assigned_to = Column(SqEnum(TodoAssignee), nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, nullable=True)


class MotivationalQuote(Base):
    __tablename__ = "motivational_quotes"
    id = Column(Integer, primary_key=True, index=True)
    quote = Column(String, nullable=False)
    target_user = Column(SqEnum(Person, values_callable=lambda e: [m.value for m in e]), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    expires_at = Column(DateTime, nullable=True, index=True)  # only the shared-quote strategy sets this
