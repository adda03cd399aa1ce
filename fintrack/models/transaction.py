from datetime import date, datetime
from ..extensions import db

TRANSACTION_TYPES = ("income", "expense")


class Transaction(db.Model):
    __tablename__ = "transactions"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)  # signed
    type = db.Column(db.String(20), nullable=False)  # income/expense
    date = db.Column(db.Date, default=date.today, nullable=False)
    description = db.Column(db.String(255), nullable=False)
    payment_method = db.Column(db.String(50))
    tags = db.Column(db.JSON, default=list)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "category_id": self.category_id,
            "amount": float(self.amount),
            "type": self.type,
            "transaction_date": self.date.isoformat(),
            "description": self.description,
            "payment_method": self.payment_method,
            "tags": self.tags or [],
            "category": self.category.to_dict() if self.category else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
