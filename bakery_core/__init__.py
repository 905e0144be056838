# bakery_core/__init__.py
import os
import logging

from flask import Flask, current_app, request
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_wtf.csrf import CSRFProtect
from flask_babel import Babel, _
from flask_login import LoginManager

# Single db instance
db = SQLAlchemy()
bcrypt = Bcrypt()
csrf = CSRFProtect()
babel = Babel()
login_manager = LoginManager()

from .config import config as app_config

logger = logging.getLogger(__name__)


def get_locale():
    supported = current_app.config.get('BABEL_SUPPORTED_LOCALES') or ['en']
    lang = request.args.get('lang')
    if lang in supported:
        return lang
    return request.accept_languages.best_match(supported)


def create_default_admin(email=None, password=None):
    """Create the admin account (and its profile) unless the email already exists."""
    from .models import User, Profile

    email = (email or current_app.config['DEFAULT_ADMIN_EMAIL']).strip().lower()
    password = password or current_app.config['DEFAULT_ADMIN_PASSWORD']

    existing = db.session.execute(db.select(User).filter_by(email=email)).scalar()
    if existing:
        logger.info("Admin %s already exists.", email)
        return existing

    hashed_pw = bcrypt.generate_password_hash(password).decode('utf-8')
    admin = User(email=email, password=hashed_pw, role='admin', full_name='Bakery Admin')
    admin.profile = Profile(full_name=admin.full_name, email=email)
    db.session.add(admin)
    db.session.commit()
    logger.info("Default admin %s created.", email)
    return admin


def create_app(config_name=None):
    root_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    app = Flask(
        __name__,
        template_folder=os.path.join(root_dir, 'templates'),
        static_folder=os.path.join(root_dir, 'static')
    )

    env = config_name or os.getenv('FLASK_ENV') or 'production'
    config_class = app_config.get(env)
    if not config_class:
        raise ValueError(f"Unknown config: {env}")

    config_instance = config_class()
    config_instance.validate()
    app.config.from_object(config_instance)
    app.config['ENV_NAME'] = env

    app.config['UPLOAD_FOLDER'] = os.path.join(app.static_folder, 'uploads')
    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))
    app.logger.info("Loaded config: %s", env)

    db.init_app(app)
    bcrypt.init_app(app)
    csrf.init_app(app)
    babel.init_app(app, locale_selector=get_locale)

    login_manager.init_app(app)
    login_manager.login_view = 'login'
    login_manager.login_message = "Please log in to access this page."
    login_manager.login_message_category = 'info'

    @login_manager.user_loader
    def load_user(user_id):
        from .models import User
        return db.session.get(User, int(user_id))

    @app.context_processor
    def inject_translator():
        return dict(_=_)

    from .cli import register_commands
    register_commands(app)

    return app


# Expose models for easy import
from .models import (
    User,
    Profile,
    Product,
    Tag,
    Order,
    OrderItem,
    OrderStatus,
    InvoiceSettings,
    get_or_create_invoice_settings,
    get_storefront_contact,
)
