import logging

from flask import Flask, jsonify
from .extensions import db, migrate, login_manager, jwt, cors
from .config import Config
from .errors import register_error_handlers

from .blueprints.auth.routes import auth_bp
from .blueprints.categories.routes import categories_bp
from .blueprints.transactions.routes import transactions_bp
from .blueprints.budgets.routes import budgets_bp
from .blueprints.analytics.routes import analytics_bp
from .blueprints.reports.routes import reports_bp

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("Food & Dining", "#EF4444", "utensils", "expense"),
    ("Transportation", "#F59E0B", "car", "expense"),
    ("Shopping", "#8B5CF6", "shopping-bag", "expense"),
    ("Entertainment", "#EC4899", "film", "expense"),
    ("Bills & Utilities", "#3B82F6", "file-text", "expense"),
    ("Healthcare", "#14B8A6", "heart", "expense"),
    ("Other Expenses", "#6B7280", "more-horizontal", "expense"),
    ("Salary", "#10B981", "briefcase", "income"),
    ("Freelance", "#22C55E", "laptop", "income"),
    ("Investments", "#0EA5E9", "trending-up", "income"),
    ("Other Income", "#84CC16", "plus-circle", "income"),
]


def seed_global_categories():
    """Create the shared default categories that are missing. Safe to re-run."""
    from .models import Category
    existing = {(c.name.lower(), c.type) for c in Category.query.filter_by(user_id=None).all()}
    created = 0
    for name, color, icon, ctype in DEFAULT_CATEGORIES:
        if (name.lower(), ctype) not in existing:
            db.session.add(Category(user_id=None, name=name, color=color, icon=icon, type=ctype))
            created += 1
    if created:
        db.session.commit()
    return created


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    jwt.init_app(app)
    origins = [o.strip() for o in app.config.get("CORS_ORIGINS", "").split(",") if o.strip()]
    cors.init_app(app, resources={r"/api/*": {"origins": origins}})

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Access token required"}), 401

    # Ensure tables exist for a smooth first run
    with app.app_context():
        db.create_all()
        try:
            created = seed_global_categories()
            if created:
                logger.info("Seeded %d global categories", created)
        except Exception:
            # Do not block app startup if seeding fails
            db.session.rollback()
            logger.exception("Seeding global categories failed")

    # Register blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(transactions_bp)
    app.register_blueprint(budgets_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(reports_bp)
    register_error_handlers(app)

    @app.route("/api/health")
    def health():
        return jsonify({"status": "OK"})

    return app
