# bakery_core/cli.py
import click

from . import db, create_default_admin

SAMPLE_PRODUCTS = [
    {
        'name': "Chocolate Chip Cookies",
        'price': 299,
        'description': "Classic homemade cookies with premium chocolate chips",
        'image': "https://images.unsplash.com/photo-1499636136210-6f4ee915583e?w=400",
        'category': "cookies",
    },
    {
        'name': "Double Fudge Brownies",
        'price': 399,
        'description': "Rich, moist brownies with extra chocolate goodness",
        'image': "https://images.unsplash.com/photo-1606313564200-e75d5e30476c?w=400",
        'category': "brownies",
    },
    {
        'name': "Butter Croissants",
        'price': 199,
        'description': "Flaky, buttery pastries perfect for breakfast",
        'image': "https://images.unsplash.com/photo-1555507036-ab1f4038808a?w=400",
        'category': "pastries",
    },
    {
        'name': "Oatmeal Raisin Cookies",
        'price': 279,
        'description': "Healthy cookies with oats and sweet raisins",
        'image': "https://images.unsplash.com/photo-1617016517476-9b9a083de78d?w=400",
        'category': "cookies",
    },
    {
        'name': "Walnut Brownies",
        'price': 449,
        'description': "Premium brownies with crunchy walnuts",
        'image': "https://images.unsplash.com/photo-1551058622-2b5b76ccc050?w=400",
        'category': "brownies",
    },
    {
        'name': "Danish Pastries",
        'price': 249,
        'description': "Sweet pastries with fruit fillings",
        'image': "https://images.unsplash.com/photo-1565958011703-44f9829ba187?w=400",
        'category': "pastries",
    },
]


def seed_sample_products():
    """Insert the sample catalog, skipping names that already exist. Returns the number added."""
    from .models import Product

    added = 0
    for data in SAMPLE_PRODUCTS:
        exists = db.session.execute(db.select(Product).filter_by(name=data['name'])).scalar()
        if exists:
            continue
        db.session.add(Product(stock=20, base_weight=500, weight_unit='grams', **data))
        added += 1
    db.session.commit()
    return added


def register_commands(app):
    @app.cli.command("reset-db")
    def reset_db():
        db.drop_all()
        db.create_all()
        click.echo("Database reset complete.")

    @app.cli.command("create-admin")
    @click.argument("email")
    @click.argument("password")
    def create_admin(email, password):
        db.create_all()
        admin = create_default_admin(email, password)
        click.echo(f"Admin ready: {admin.email}")

    @app.cli.command("seed-products")
    def seed_products():
        db.create_all()
        click.echo(f"Added {seed_sample_products()} sample product(s).")
