# app.py - Bakehouse storefront & order management
import os
import csv
from io import BytesIO, StringIO
from functools import wraps
from urllib.parse import urlparse

from flask import (
    render_template,
    request,
    redirect,
    url_for,
    flash,
    send_file,
    Response,
)
from flask_login import login_user, logout_user, login_required, current_user
from werkzeug.datastructures import FileStorage
from sqlalchemy.exc import SQLAlchemyError

from bakery_core import create_app, create_default_admin, db, bcrypt
from bakery_core.models import (
    User,
    Profile,
    Product,
    Tag,
    Order,
    OrderStatus,
    get_or_create_invoice_settings,
    get_storefront_contact,
)
from bakery_core.cart import (
    STOREFRONT_CART,
    ORDER_BUILDER_CART,
    add_item,
    update_quantity,
    remove_item,
    clear_cart,
    cart_summary,
    load_cart,
    save_cart,
)
from bakery_core.catalog import (
    parse_weight_options,
    format_weight,
    filter_products,
    sort_products,
    group_by_category,
)
from bakery_core.orders import EmptyCartError, create_order_from_cart, recalculate_order, order_stats
from forms import (
    LoginForm,
    CreateUserForm,
    ProfileForm,
    ProductForm,
    TagForm,
    DeleteItemForm,
    CatalogFilterForm,
    AddToCartForm,
    CartQuantityForm,
    CheckoutForm,
    OrderBuilderForm,
    OrderEditForm,
    OrderStatusForm,
    InvoiceSettingsForm,
)
from utils.email import send_order_email
from utils.pdf_generator import generate_invoice_pdf, invoice_filename, InvoiceGenerationError
from utils.pricing import compute_order_totals, format_rupees
from utils.s3_storage import upload_product_image, ImageUploadError
from utils.whatsapp import build_order_message, build_whatsapp_link

env = os.getenv('FLASK_ENV', 'production')
app = create_app(env)


@app.template_filter('rupees')
def rupees_filter(value):
    return format_rupees(value or 0)


@app.context_processor
def inject_cart_count():
    return dict(cart_count=sum(line['quantity'] for line in load_cart(STOREFRONT_CART)))


# ========================
# Authentication & Decorators
# ========================

def role_required(roles):
    def decorator(f):
        @wraps(f)
        @login_required
        def decorated_function(*args, **kwargs):
            if current_user.role not in roles:
                flash("You don't have permission to access this page.", "error")
                return redirect(url_for('new_order'))
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def _safe_next(target):
    if not target:
        return None
    parsed = urlparse(target)
    if parsed.scheme or parsed.netloc:
        return None
    return target


@app.route('/login', methods=['GET', 'POST'])
def login():
    form = LoginForm()
    if form.validate_on_submit():
        email = form.email.data.strip().lower()
        user = db.session.execute(db.select(User).filter_by(email=email)).scalar()

        if user and bcrypt.check_password_hash(user.password, form.password.data):
            login_user(user)
            flash(f"Welcome, {user.full_name or user.email}!", "success")
            default = url_for('dashboard') if user.is_admin else url_for('new_order')
            return redirect(_safe_next(request.args.get('next')) or default)
        flash("Invalid email or password.", "error")
    return render_template('auth/login.html', form=form)


@app.route('/logout')
def logout():
    logout_user()
    flash("You have been logged out.", "info")
    return redirect(url_for('login'))


# ========================
# Storefront
# ========================

def _weight_choices(product):
    choices = [(-1, f"{format_weight(product.base_weight, product.weight_unit) or 'Regular'} - "
                    f"{format_rupees(product.price)}")]
    for index, option in enumerate(parse_weight_options(product.weight_options)):
        choices.append((index, f"{format_weight(option['weight'], option['unit'])} - "
                               f"{format_rupees(option['price'])}"))
    return choices


@app.route('/')
def storefront():
    filter_form = CatalogFilterForm(formdata=request.args)
    products = db.session.execute(
        db.select(Product).order_by(Product.category, Product.name)
    ).scalars().all()
    products = filter_products(
        products,
        query=filter_form.q.data,
        category=filter_form.category.data,
        price_range=filter_form.price_range.data,
        availability=filter_form.availability.data,
    )
    grouped = group_by_category(sort_products(products, filter_form.sort.data))
    return render_template(
        'storefront/index.html',
        grouped=grouped,
        filter_form=filter_form,
        contact=get_storefront_contact(),
        add_forms={p.id: _add_to_cart_form(p) for p in products},
    )


@app.route('/products/<int:product_id>')
def product_detail(product_id):
    product = db.get_or_404(Product, product_id)
    return render_template(
        'storefront/product.html',
        product=product,
        weight_options=parse_weight_options(product.weight_options),
        add_form=_add_to_cart_form(product),
        contact=get_storefront_contact(),
    )


def _add_to_cart_form(product):
    form = AddToCartForm(formdata=None, product_id=product.id)
    form.weight_option.choices = _weight_choices(product)
    return form


def _add_to_cart(session_key):
    product = db.session.get(Product, request.form.get('product_id', type=int) or 0)
    if not product:
        flash("Product not found.", "error")
        return None

    form = AddToCartForm()
    form.weight_option.choices = _weight_choices(product)
    if not form.validate_on_submit():
        flash("Please choose a valid size.", "error")
        return None
    if not product.in_stock:
        flash(f"{product.name} is out of stock.", "error")
        return None

    options = parse_weight_options(product.weight_options)
    index = form.weight_option.data
    option = options[index] if 0 <= index < len(options) else None
    save_cart(add_item(load_cart(session_key), product, option), session_key)
    flash(f"Added {product.name} to cart.", "success")
    return product


def _update_cart(session_key):
    form = CartQuantityForm()
    if form.validate_on_submit():
        save_cart(update_quantity(load_cart(session_key), form.key.data, form.quantity.data), session_key)
    else:
        flash("Invalid quantity.", "error")


def _remove_from_cart(session_key):
    key = request.form.get('key', '')
    save_cart(remove_item(load_cart(session_key), key), session_key)
    flash("Item removed from cart.", "info")


@app.route('/cart')
def view_cart():
    return render_template(
        'storefront/cart.html',
        cart=cart_summary(load_cart(STOREFRONT_CART)),
        form=CheckoutForm(),
    )


@app.route('/cart/add', methods=['POST'])
def cart_add():
    _add_to_cart(STOREFRONT_CART)
    return redirect(_safe_next(request.form.get('next')) or url_for('view_cart'))


@app.route('/cart/update', methods=['POST'])
def cart_update():
    _update_cart(STOREFRONT_CART)
    return redirect(url_for('view_cart'))


@app.route('/cart/remove', methods=['POST'])
def cart_remove():
    _remove_from_cart(STOREFRONT_CART)
    return redirect(url_for('view_cart'))


@app.route('/cart/clear', methods=['POST'])
def cart_clear():
    save_cart(clear_cart(), STOREFRONT_CART)
    flash("Cart cleared.", "info")
    return redirect(url_for('view_cart'))


@app.route('/checkout', methods=['POST'])
def checkout():
    form = CheckoutForm()
    cart = load_cart(STOREFRONT_CART)
    if not cart:
        flash("Please add items to your cart before placing an order.", "error")
        return redirect(url_for('storefront'))
    if not form.validate_on_submit():
        flash("Please fill in all required customer details.", "error")
        return render_template('storefront/cart.html', cart=cart_summary(cart), form=form), 400

    customer = {
        'name': form.name.data.strip(),
        'phone': form.phone.data.strip(),
        'address': form.address.data.strip(),
        'notes': (form.notes.data or '').strip(),
    }
    link = build_whatsapp_link(app.config['WHATSAPP_NUMBER'], build_order_message(cart, customer))
    app.logger.info("Storefront checkout for %s with %d line(s)", customer['name'], len(cart))
    save_cart(clear_cart(), STOREFRONT_CART)
    return redirect(link)


# ========================
# Staff: Order Builder
# ========================

def _order_builder_page(form, status=200):
    products = db.session.execute(
        db.select(Product).order_by(Product.category, Product.name)
    ).scalars().all()
    cart = load_cart(ORDER_BUILDER_CART)
    summary = cart_summary(cart)
    totals = compute_order_totals(
        summary['subtotal'],
        form.shipping_charge.data or 0,
        form.discount_percent.data or 0,
    )
    return render_template(
        'orders/new.html',
        form=form,
        products=products,
        cart=summary,
        totals=totals,
        add_forms={p.id: _add_to_cart_form(p) for p in products},
    ), status


@app.route('/orders/new', methods=['GET', 'POST'])
@login_required
def new_order():
    form = OrderBuilderForm()
    if request.method == 'GET':
        return _order_builder_page(form)

    cart = load_cart(ORDER_BUILDER_CART)
    if not form.validate_on_submit():
        flash("Please fill in all required customer details.", "error")
        return _order_builder_page(form, 400)

    try:
        order = create_order_from_cart(
            cart,
            customer={
                'name': form.customer_name.data,
                'phone': form.customer_phone.data,
                'email': form.customer_email.data,
                'address': form.customer_address.data,
                'notes': form.notes.data,
            },
            user=current_user,
            shipping=form.shipping_charge.data or 0,
            discount_percent=form.discount_percent.data or 0,
            order_date=form.order_date.data,
            invoice_date=form.invoice_date.data,
            delivery_date=form.delivery_date.data,
        )
    except EmptyCartError:
        flash("Please add items to the cart before placing an order.", "error")
        return _order_builder_page(form, 400)
    except SQLAlchemyError:
        db.session.rollback()
        app.logger.exception("Saving order failed")
        flash("Failed to save the order. Please try again.", "error")
        return _order_builder_page(form, 500)

    settings = get_or_create_invoice_settings(current_user)
    try:
        pdf_bytes = generate_invoice_pdf(order, order.items, settings)
    except InvoiceGenerationError:
        flash("Order saved, but the PDF invoice could not be generated.", "warning")
        save_cart(clear_cart(), ORDER_BUILDER_CART)
        return redirect(url_for('new_order'))

    # The order stays saved even if the confirmation email fails
    if not send_order_email(order, order.items, pdf_bytes, settings, admin_email=current_user.email):
        app.logger.warning("Confirmation email for %s was not sent", order.invoice_number)

    save_cart(clear_cart(), ORDER_BUILDER_CART)
    flash("Order placed and invoice generated.", "success")
    return send_file(
        BytesIO(pdf_bytes),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=invoice_filename(order),
    )


@app.route('/orders/new/cart/add', methods=['POST'])
@login_required
def order_cart_add():
    _add_to_cart(ORDER_BUILDER_CART)
    return redirect(url_for('new_order'))


@app.route('/orders/new/cart/update', methods=['POST'])
@login_required
def order_cart_update():
    _update_cart(ORDER_BUILDER_CART)
    return redirect(url_for('new_order'))


@app.route('/orders/new/cart/remove', methods=['POST'])
@login_required
def order_cart_remove():
    _remove_from_cart(ORDER_BUILDER_CART)
    return redirect(url_for('new_order'))


@app.route('/orders/new/cart/clear', methods=['POST'])
@login_required
def order_cart_clear():
    save_cart(clear_cart(), ORDER_BUILDER_CART)
    return redirect(url_for('new_order'))


@app.route('/orders/<int:order_id>/invoice')
@login_required
def download_invoice(order_id):
    order = db.get_or_404(Order, order_id)
    if not current_user.is_admin and order.user_id != current_user.id:
        flash("Access denied.", "error")
        return redirect(url_for('new_order'))
    try:
        pdf_bytes = generate_invoice_pdf(order, order.items, get_or_create_invoice_settings(current_user))
    except InvoiceGenerationError:
        flash("Failed to generate PDF invoice. Please try again.", "error")
        return redirect(url_for('order_detail', order_id=order.id) if current_user.is_admin else url_for('new_order'))
    return send_file(
        BytesIO(pdf_bytes),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=invoice_filename(order),
    )


@app.route('/settings/invoice', methods=['GET', 'POST'])
@login_required
def invoice_settings():
    settings = get_or_create_invoice_settings(current_user)
    form = InvoiceSettingsForm(obj=settings)
    if form.validate_on_submit():
        try:
            form.populate_obj(settings)
            db.session.commit()
            flash("Invoice settings saved successfully.", "success")
            return redirect(url_for('invoice_settings'))
        except SQLAlchemyError:
            db.session.rollback()
            app.logger.exception("Saving invoice settings failed")
            flash("Failed to save invoice settings.", "error")
    return render_template('settings/invoice.html', form=form)


# ========================
# Admin: Dashboard
# ========================

@app.route('/dashboard')
@role_required(['admin'])
def dashboard():
    orders = db.session.execute(db.select(Order).order_by(Order.created_at.desc())).scalars().all()
    product_count = db.session.execute(db.select(db.func.count(Product.id))).scalar()
    return render_template(
        'admin/dashboard.html',
        stats=order_stats(orders, product_count),
        recent_orders=orders[:10],
    )


@app.route('/dashboard/export_orders')
@role_required(['admin'])
def export_orders():
    orders = db.session.execute(db.select(Order).order_by(Order.id)).scalars().all()
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(['Invoice', 'Customer', 'Phone', 'Status', 'Order Date',
                     'Subtotal', 'Shipping', 'Discount', 'Total', 'Shipment Number'])
    for order in orders:
        writer.writerow([
            order.invoice_number,
            order.customer_name,
            order.customer_phone or '',
            order.status.value,
            order.effective_order_date.isoformat(),
            order.subtotal,
            order.shipping_charges or 0,
            order.discount_amount or 0,
            order.total,
            order.shipment_number or '',
        ])
    return Response(
        output.getvalue(),
        mimetype='text/csv',
        headers={'Content-Disposition': 'attachment; filename=orders.csv'}
    )


# ========================
# Admin: Products
# ========================

def _apply_product_form(product, form):
    product.name = form.name.data.strip()
    product.category = form.category.data
    product.price = float(form.price.data)
    product.mrp = float(form.mrp.data) if form.mrp.data is not None else None
    product.description = (form.description.data or '').strip() or None
    product.stock = form.stock.data or 0
    product.base_weight = float(form.base_weight.data) if form.base_weight.data is not None else 500
    product.weight_unit = form.weight_unit.data
    product.weight_options = form.cleaned_weight_options() or None
    product.tags = list(form.tags.data or [])

    upload = form.image_file.data
    if isinstance(upload, FileStorage) and upload.filename:
        product.image = upload_product_image(upload)
    else:
        product.image = (form.image_url.data or '').strip() or None


def _pad_weight_rows(form, rows=3):
    while len(form.weight_options) < rows:
        form.weight_options.append_entry()


@app.route('/admin/products')
@role_required(['admin'])
def list_products():
    products = db.session.execute(db.select(Product).order_by(Product.created_at.desc())).scalars().all()
    return render_template('products/list.html', products=products, delete_form=DeleteItemForm())


@app.route('/admin/products/add', methods=['GET', 'POST'])
@role_required(['admin'])
def add_product():
    form = ProductForm()
    if form.validate_on_submit():
        product = Product()
        try:
            _apply_product_form(product, form)
            db.session.add(product)
            db.session.commit()
            flash(f"Product '{product.name}' added successfully.", "success")
            return redirect(url_for('list_products'))
        except ImageUploadError as e:
            db.session.rollback()
            flash(str(e), "error")
        except SQLAlchemyError:
            db.session.rollback()
            app.logger.exception("Adding product failed")
            flash("Failed to add product.", "error")
    _pad_weight_rows(form)
    return render_template('products/form.html', form=form, product=None)


@app.route('/admin/products/<int:product_id>/edit', methods=['GET', 'POST'])
@role_required(['admin'])
def edit_product(product_id):
    product = db.get_or_404(Product, product_id)
    form = ProductForm(obj=product)
    if request.method == 'GET':
        form.weight_options.process(None, parse_weight_options(product.weight_options))
        form.image_url.data = product.image
    if form.validate_on_submit():
        try:
            _apply_product_form(product, form)
            db.session.commit()
            flash(f"Product '{product.name}' updated successfully.", "success")
            return redirect(url_for('list_products'))
        except ImageUploadError as e:
            db.session.rollback()
            flash(str(e), "error")
        except SQLAlchemyError:
            db.session.rollback()
            app.logger.exception("Updating product %s failed", product_id)
            flash("Failed to update product.", "error")
    _pad_weight_rows(form, rows=len(form.weight_options) + 1)
    return render_template('products/form.html', form=form, product=product)


@app.route('/admin/products/<int:product_id>/delete', methods=['POST'])
@role_required(['admin'])
def delete_product(product_id):
    product = db.get_or_404(Product, product_id)
    try:
        db.session.delete(product)
        db.session.commit()
        flash(f"Product '{product.name}' deleted successfully.", "success")
    except SQLAlchemyError:
        db.session.rollback()
        app.logger.exception("Deleting product %s failed", product_id)
        flash("Failed to delete product.", "error")
    return redirect(url_for('list_products'))


# ========================
# Admin: Tags
# ========================

@app.route('/admin/tags', methods=['GET', 'POST'])
@role_required(['admin'])
def list_tags():
    form = TagForm()
    if form.validate_on_submit():
        name = form.name.data.strip().lower()
        if db.session.execute(db.select(Tag).filter_by(name=name)).scalar():
            flash(f"Tag '{name}' already exists.", "error")
        else:
            try:
                db.session.add(Tag(name=name))
                db.session.commit()
                flash(f"Tag '{name}' added.", "success")
                return redirect(url_for('list_tags'))
            except SQLAlchemyError:
                db.session.rollback()
                app.logger.exception("Adding tag %s failed", name)
                flash("Failed to add tag.", "error")
    tags = db.session.execute(db.select(Tag).order_by(Tag.name)).scalars().all()
    return render_template('tags/list.html', tags=tags, form=form, delete_form=DeleteItemForm())


@app.route('/admin/tags/<int:tag_id>/delete', methods=['POST'])
@role_required(['admin'])
def delete_tag(tag_id):
    tag = db.get_or_404(Tag, tag_id)
    try:
        db.session.delete(tag)
        db.session.commit()
        flash(f"Tag '{tag.name}' deleted.", "success")
    except SQLAlchemyError:
        db.session.rollback()
        app.logger.exception("Deleting tag %s failed", tag_id)
        flash("Failed to delete tag.", "error")
    return redirect(url_for('list_tags'))


# ========================
# Admin: Orders
# ========================

@app.route('/admin/orders')
@role_required(['admin'])
def list_orders():
    status = request.args.get('status', '')
    query = db.select(Order).order_by(Order.created_at.desc())
    if status in {s.value for s in OrderStatus}:
        query = query.filter(Order.status == OrderStatus(status))
    orders = db.session.execute(query).scalars().all()
    return render_template('orders/list.html', orders=orders, statuses=list(OrderStatus),
                           current_status=status, delete_form=DeleteItemForm())


@app.route('/admin/orders/<int:order_id>')
@role_required(['admin'])
def order_detail(order_id):
    order = db.get_or_404(Order, order_id)
    status_form = OrderStatusForm(status=order.status.value)
    return render_template('orders/detail.html', order=order, status_form=status_form)


@app.route('/admin/orders/<int:order_id>/status', methods=['POST'])
@role_required(['admin'])
def update_order_status(order_id):
    order = db.get_or_404(Order, order_id)
    form = OrderStatusForm()
    if not form.validate_on_submit():
        flash("Invalid status.", "error")
        return redirect(url_for('order_detail', order_id=order.id))
    try:
        order.status = OrderStatus(form.status.data)
        db.session.commit()
        flash("Order status updated successfully.", "success")
    except SQLAlchemyError:
        db.session.rollback()
        app.logger.exception("Updating status of order %s failed", order_id)
        flash("Failed to update order status.", "error")
    return redirect(_safe_next(request.form.get('next')) or url_for('order_detail', order_id=order.id))


@app.route('/admin/orders/<int:order_id>/edit', methods=['GET', 'POST'])
@role_required(['admin'])
def edit_order(order_id):
    order = db.get_or_404(Order, order_id)
    form = OrderEditForm(obj=order)
    if request.method == 'GET':
        form.status.data = order.status.value
        for entry, item in zip(form.items, order.items):
            entry.form.item_id.data = item.id
            entry.form.weight_unit.data = item.weight_unit or ''

    if form.validate_on_submit():
        items_by_id = {item.id: item for item in order.items}
        try:
            order.customer_name = form.customer_name.data.strip()
            order.customer_email = (form.customer_email.data or '').strip() or None
            order.customer_phone = (form.customer_phone.data or '').strip() or None
            order.customer_address = (form.customer_address.data or '').strip() or None
            order.notes = (form.notes.data or '').strip() or None
            order.shipping_charges = float(form.shipping_charges.data or 0)
            order.discount_percent = float(form.discount_percent.data or 0)
            order.custom_order_date = form.custom_order_date.data
            order.custom_invoice_date = form.custom_invoice_date.data
            order.delivery_date = form.delivery_date.data
            order.shipment_number = (form.shipment_number.data or '').strip() or None
            order.status = OrderStatus(form.status.data)

            for entry in form.items:
                f = entry.form
                item = items_by_id.get(int(f.item_id.data or 0))
                if item is None:
                    continue
                item.product_name = f.product_name.data.strip()
                item.product_price = float(f.product_price.data)
                item.quantity = f.quantity.data
                item.weight = float(f.weight.data) if f.weight.data is not None else None
                item.weight_unit = f.weight_unit.data or None

            recalculate_order(order)
            db.session.commit()
            flash("Order updated successfully.", "success")
            return redirect(url_for('order_detail', order_id=order.id))
        except (SQLAlchemyError, ValueError):
            db.session.rollback()
            app.logger.exception("Updating order %s failed", order_id)
            flash("Failed to update order.", "error")
    return render_template('orders/edit.html', form=form, order=order)


@app.route('/admin/orders/<int:order_id>/delete', methods=['POST'])
@role_required(['admin'])
def delete_order(order_id):
    order = db.get_or_404(Order, order_id)
    total = order.total
    try:
        db.session.delete(order)
        db.session.commit()
        flash(f"Order deleted successfully. Revenue reduced by {format_rupees(total)}", "success")
    except SQLAlchemyError:
        db.session.rollback()
        app.logger.exception("Deleting order %s failed", order_id)
        flash("Failed to delete order.", "error")
    return redirect(url_for('list_orders'))


# ========================
# Admin: Users
# ========================

@app.route('/admin/users')
@role_required(['admin'])
def list_users():
    users = db.session.execute(db.select(User).order_by(User.email)).scalars().all()
    return render_template('users/list.html', users=users, delete_form=DeleteItemForm())


@app.route('/admin/users/add', methods=['GET', 'POST'])
@role_required(['admin'])
def add_user():
    form = CreateUserForm()
    if form.validate_on_submit():
        email = form.email.data.strip().lower()
        try:
            user = db.session.execute(db.select(User).filter_by(email=email)).scalar()
            if user:
                profile = user.profile or Profile(email=email)
                user.profile = profile
                profile.full_name = form.full_name.data.strip()
                profile.phone = (form.phone.data or '').strip() or None
                profile.address = (form.address.data or '').strip() or None
                user.full_name = profile.full_name
                db.session.commit()
                flash("Existing user updated successfully.", "success")
                return redirect(url_for('list_users'))

            if not form.password.data:
                flash("Password is required for new users.", "error")
                return render_template('users/form.html', form=form, user=None), 400

            hashed_pw = bcrypt.generate_password_hash(form.password.data).decode('utf-8')
            user = User(email=email, password=hashed_pw, role=form.role.data,
                        full_name=form.full_name.data.strip())
            user.profile = Profile(
                full_name=user.full_name,
                email=email,
                phone=(form.phone.data or '').strip() or None,
                address=(form.address.data or '').strip() or None,
            )
            db.session.add(user)
            db.session.commit()
            flash(f"User '{email}' created successfully.", "success")
            return redirect(url_for('list_users'))
        except SQLAlchemyError:
            db.session.rollback()
            app.logger.exception("Creating user %s failed", email)
            flash("Failed to process user.", "error")
    return render_template('users/form.html', form=form, user=None)


@app.route('/admin/users/<int:user_id>/edit', methods=['GET', 'POST'])
@role_required(['admin'])
def edit_user(user_id):
    user = db.get_or_404(User, user_id)
    profile = user.profile or Profile(email=user.email, full_name=user.full_name)
    form = ProfileForm(obj=profile)
    if form.validate_on_submit():
        try:
            user.profile = profile
            profile.full_name = form.full_name.data.strip()
            profile.phone = (form.phone.data or '').strip() or None
            profile.address = (form.address.data or '').strip() or None
            user.full_name = profile.full_name
            db.session.commit()
            flash("User updated successfully.", "success")
            return redirect(url_for('list_users'))
        except SQLAlchemyError:
            db.session.rollback()
            app.logger.exception("Updating user %s failed", user_id)
            flash("Failed to update user.", "error")
    return render_template('users/form.html', form=form, user=user)


@app.route('/admin/users/<int:user_id>/delete', methods=['POST'])
@role_required(['admin'])
def delete_user(user_id):
    user = db.get_or_404(User, user_id)
    if user.id == current_user.id:
        flash("You cannot delete your own account.", "error")
        return redirect(url_for('list_users'))
    try:
        for order in user.orders:
            order.user_id = None
        db.session.delete(user)
        db.session.commit()
        flash("User deleted successfully.", "success")
    except SQLAlchemyError:
        db.session.rollback()
        app.logger.exception("Deleting user %s failed", user_id)
        flash("Failed to delete user.", "error")
    return redirect(url_for('list_users'))


@app.errorhandler(404)
def not_found(error):
    return render_template('errors/404.html'), 404


# ========================
# Run the App
# ========================

if __name__ == '__main__':
    with app.app_context():
        db.create_all()
        create_default_admin()
    app.run()
