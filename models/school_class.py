from __future__ import annotations
import uuid
from extensions import db

class SchoolClass(db.Model):
    __tablename__ = "classes"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(100), unique=True, nullable=False)
    level = db.Column(db.String(50), nullable=True)
    academic_year = db.Column(db.String(20), nullable=True)

    def __repr__(self):
        return f"<SchoolClass {self.name}>"
