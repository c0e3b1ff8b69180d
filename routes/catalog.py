from flask import Blueprint, jsonify

from models import db
from models.category import Category
from models.program import Program

catalog_bp = Blueprint("catalog", __name__)


def _program_json(p: Program) -> dict:
    return {
        "id": p.id,
        "title": p.title,
        "description": p.description,
        "category_id": p.category_id,
        "category_name": p.category.name if p.category else None,
        "duration_mins": p.duration_mins,
        "location": p.location,
        "capacity": p.capacity,
        "image_url": p.image_url,
    }


@catalog_bp.get("/categories")
def list_categories():
    rows = Category.query.order_by(Category.name.asc()).all()
    return jsonify([
        {"id": c.id, "name": c.name, "description": c.description, "image_url": c.image_url}
        for c in rows
    ]), 200


@catalog_bp.get("/programs")
def list_programs():
    rows = Program.query.filter(Program.is_active.is_(True)).order_by(Program.title.asc()).all()
    return jsonify(category_name="All Programs", programs=[_program_json(p) for p in rows]), 200


@catalog_bp.get("/programs/category/<int:category_id>")
def list_programs_in_category(category_id: int):
    category = db.session.get(Category, category_id)
    if not category:
        return jsonify(error="Category not found"), 404

    rows = (
        Program.query
        .filter(Program.category_id == category_id, Program.is_active.is_(True))
        .order_by(Program.title.asc())
        .all()
    )
    return jsonify(category_name=category.name, programs=[_program_json(p) for p in rows]), 200


@catalog_bp.get("/programs/<int:program_id>")
def get_program(program_id: int):
    program = db.session.get(Program, program_id)
    if not program or not program.is_active:
        return jsonify(error="Program not found"), 404
    return jsonify(_program_json(program)), 200
