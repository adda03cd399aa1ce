from sqlalchemy import or_
from ..extensions import db

CATEGORY_TYPES = ("income", "expense")


class Category(db.Model):
    __tablename__ = "categories"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)  # NULL for global categories
    name = db.Column(db.String(100), nullable=False)
    color = db.Column(db.String(20), nullable=False, default="#6B7280")
    icon = db.Column(db.String(50), nullable=False, default="tag")
    type = db.Column(db.String(20), nullable=False, default="expense")

    transactions = db.relationship("Transaction", backref="category", lazy=True)
    budgets = db.relationship("Budget", backref="category", lazy=True)

    @classmethod
    def visible_to(cls, user_id):
        """Global categories plus the ones owned by ``user_id``."""
        return cls.query.filter(or_(cls.user_id == user_id, cls.user_id.is_(None)))

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "icon": self.icon,
            "type": self.type,
        }
