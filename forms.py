# forms.py

from datetime import date

from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileAllowed
from wtforms import (
    StringField, PasswordField, SubmitField, IntegerField,
    DecimalField, TextAreaField, SelectField, DateField,
    FormField, FieldList, HiddenField, ValidationError, Form
)
from wtforms.validators import DataRequired, Optional, NumberRange, Length, Email, InputRequired
from wtforms_sqlalchemy.fields import QuerySelectMultipleField
from flask_babel import lazy_gettext as _

from bakery_core import db, Tag, OrderStatus
from bakery_core.catalog import CATEGORIES, WEIGHT_UNITS, PRICE_RANGES, SORT_OPTIONS


def tag_choices():
    return db.session.execute(db.select(Tag).order_by(Tag.name)).scalars().all()


def get_order_status_choices():
    return [(status.value, status.label) for status in OrderStatus]


# -------------------
# Authentication Forms
# -------------------
class LoginForm(FlaskForm):
    email = StringField(_("Email"), validators=[DataRequired(), Email()])
    password = PasswordField(_("Password"), validators=[DataRequired()])
    submit = SubmitField(_("Login"))


class CreateUserForm(FlaskForm):
    email = StringField(_("Email"), validators=[DataRequired(), Email()])
    password = PasswordField(_("Password"), validators=[Optional(), Length(min=6)])
    full_name = StringField(_("Full Name"), validators=[DataRequired(), Length(max=100)])
    phone = StringField(_("Phone"), validators=[Optional(), Length(max=20)])
    address = TextAreaField(_("Address"), validators=[Optional()])
    role = SelectField(_("Role"), choices=[('staff', 'Staff'), ('admin', 'Admin')], default='staff')
    submit = SubmitField(_("Save User"))


class ProfileForm(FlaskForm):
    full_name = StringField(_("Full Name"), validators=[DataRequired(), Length(max=100)])
    phone = StringField(_("Phone"), validators=[Optional(), Length(max=20)])
    address = TextAreaField(_("Address"), validators=[Optional()])
    submit = SubmitField(_("Update User"))


# -------------------
# Catalog Forms
# -------------------
class WeightOptionForm(Form):
    weight = DecimalField("Weight", validators=[Optional(), NumberRange(min=0)])
    price = DecimalField("Price", validators=[Optional(), NumberRange(min=0)], places=2)
    unit = SelectField("Unit", choices=[(u, u) for u in WEIGHT_UNITS], default='grams')


class ProductForm(FlaskForm):
    name = StringField(_("Name"), validators=[DataRequired(), Length(max=150)])
    category = SelectField(_("Category"), choices=[(c, c.title()) for c in CATEGORIES],
                           validators=[DataRequired()])
    price = DecimalField(_("Selling Price (₹)"), validators=[InputRequired(), NumberRange(min=0)], places=2)
    mrp = DecimalField(_("MRP (₹)"), validators=[Optional(), NumberRange(min=0)], places=2)
    description = TextAreaField(_("Description"), validators=[Optional(), Length(max=2000)])
    stock = IntegerField(_("Stock"), default=0, validators=[Optional(), NumberRange(min=0)])
    base_weight = DecimalField(_("Base Weight"), default=500, validators=[Optional(), NumberRange(min=0)])
    weight_unit = SelectField(_("Weight Unit"), choices=[(u, u) for u in WEIGHT_UNITS], default='grams')
    weight_options = FieldList(FormField(WeightOptionForm), min_entries=0, max_entries=10)
    tags = QuerySelectMultipleField(_("Tags"), query_factory=tag_choices, get_label='name')
    image_url = StringField(_("Image URL"), validators=[Optional(), Length(max=500)])
    image_file = FileField(_("Upload Image"), validators=[
        FileAllowed(['png', 'jpg', 'jpeg', 'gif', 'webp'], "Images only.")
    ])
    submit = SubmitField(_("Save Product"))

    def validate_mrp(self, field):
        if field.data is not None and self.price.data is not None and field.data < self.price.data:
            raise ValidationError(_("MRP cannot be lower than the selling price."))

    def cleaned_weight_options(self):
        """Weight option rows that were actually filled in."""
        options = []
        for entry in self.weight_options:
            f = entry.form
            if f.weight.data is None or f.price.data is None:
                continue
            options.append({
                'weight': float(f.weight.data),
                'price': float(f.price.data),
                'unit': f.unit.data,
            })
        return options


class TagForm(FlaskForm):
    name = StringField(_("Tag"), validators=[DataRequired(), Length(max=50)])
    submit = SubmitField(_("Add Tag"))


class DeleteItemForm(FlaskForm):
    submit = SubmitField(_("Delete"))


class CatalogFilterForm(FlaskForm):
    class Meta:
        csrf = False

    q = StringField(_("Search"), render_kw={"placeholder": "Search products..."})
    category = SelectField(_("Category"), choices=[('all', 'All')] + [(c, c.title()) for c in CATEGORIES],
                           default='all')
    price_range = SelectField(_("Price"), choices=[(k, k) for k in PRICE_RANGES], default='all')
    sort = SelectField(_("Sort"), choices=[(k, k) for k in SORT_OPTIONS], default='name')
    availability = SelectField(_("Availability"), choices=[('all', 'All Items'), ('available', 'Available Now')],
                               default='all')


# -------------------
# Cart & Checkout Forms
# -------------------
class AddToCartForm(FlaskForm):
    product_id = HiddenField(validators=[DataRequired()])
    weight_option = SelectField(_("Size"), coerce=int, choices=[(-1, 'Base')], default=-1)


class CartQuantityForm(FlaskForm):
    key = HiddenField(validators=[DataRequired()])
    quantity = IntegerField(_("Quantity"), validators=[InputRequired(), NumberRange(min=0, max=99)])


class CheckoutForm(FlaskForm):
    name = StringField(_("Name"), validators=[DataRequired(), Length(max=100)])
    phone = StringField(_("Phone"), validators=[DataRequired(), Length(max=20)])
    address = TextAreaField(_("Address"), validators=[DataRequired()])
    notes = TextAreaField(_("Notes"), validators=[Optional(), Length(max=500)])
    submit = SubmitField(_("Order on WhatsApp"))


class OrderBuilderForm(FlaskForm):
    customer_name = StringField(_("Customer Name"), validators=[DataRequired(), Length(max=100)])
    customer_phone = StringField(_("Phone"), validators=[DataRequired(), Length(max=20)])
    customer_email = StringField(_("Email"), validators=[Optional(), Email()])
    customer_address = TextAreaField(_("Address"), validators=[DataRequired()])
    notes = TextAreaField(_("Notes"), validators=[Optional()])
    order_date = DateField(_("Order Date"), default=date.today, format='%Y-%m-%d', validators=[DataRequired()])
    invoice_date = DateField(_("Invoice Date"), default=date.today, format='%Y-%m-%d', validators=[DataRequired()])
    delivery_date = DateField(_("Delivery Date"), format='%Y-%m-%d', validators=[Optional()])
    shipping_charge = DecimalField(_("Shipping (₹)"), default=0, validators=[Optional(), NumberRange(min=0)])
    discount_percent = DecimalField(_("Discount (%)"), default=0,
                                    validators=[Optional(), NumberRange(min=0, max=100)])
    submit = SubmitField(_("Save Order & Download Invoice"))


# -------------------
# Order Management Forms
# -------------------
class OrderItemForm(Form):
    item_id = HiddenField()
    product_name = StringField("Item", validators=[DataRequired(), Length(max=200)])
    product_price = DecimalField("Price", validators=[InputRequired(), NumberRange(min=0)], places=2)
    quantity = IntegerField("Qty", validators=[InputRequired(), NumberRange(min=1)])
    weight = DecimalField("Weight", validators=[Optional(), NumberRange(min=0)])
    weight_unit = SelectField("Unit", choices=[('', '-')] + [(u, u) for u in WEIGHT_UNITS],
                              validators=[Optional()])


class OrderEditForm(FlaskForm):
    customer_name = StringField(_("Customer Name"), validators=[DataRequired(), Length(max=100)])
    customer_email = StringField(_("Email"), validators=[Optional(), Email()])
    customer_phone = StringField(_("Phone"), validators=[Optional(), Length(max=20)])
    customer_address = TextAreaField(_("Address"), validators=[Optional()])
    notes = TextAreaField(_("Notes"), validators=[Optional()])
    shipping_charges = DecimalField(_("Shipping (₹)"), validators=[Optional(), NumberRange(min=0)])
    discount_percent = DecimalField(_("Discount (%)"), validators=[Optional(), NumberRange(min=0, max=100)])
    custom_order_date = DateField(_("Order Date"), format='%Y-%m-%d', validators=[Optional()])
    custom_invoice_date = DateField(_("Invoice Date"), format='%Y-%m-%d', validators=[Optional()])
    delivery_date = DateField(_("Delivery Date"), format='%Y-%m-%d', validators=[Optional()])
    shipment_number = StringField(_("Shipment Number"), validators=[Optional(), Length(max=100)])
    status = SelectField(_("Status"), choices=get_order_status_choices(), default=OrderStatus.PENDING.value)
    items = FieldList(FormField(OrderItemForm), min_entries=0)
    submit = SubmitField(_("Update Order"))


class OrderStatusForm(FlaskForm):
    status = SelectField(_("Status"), choices=get_order_status_choices(), validators=[DataRequired()])


class InvoiceSettingsForm(FlaskForm):
    business_name = StringField(_("Business Name"), validators=[DataRequired(), Length(max=128)])
    business_subtitle = StringField(_("Business Subtitle"), validators=[Optional(), Length(max=128)])
    phone = StringField(_("Phone Number"), validators=[DataRequired(), Length(max=30)])
    email = StringField(_("Email Address"), validators=[DataRequired(), Email()])
    submit = SubmitField(_("Save Settings"))
