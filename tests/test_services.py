import os
import shutil
import smtplib
import tempfile
import unittest
from datetime import date
from io import BytesIO
from types import SimpleNamespace
from unittest.mock import patch

from werkzeug.datastructures import FileStorage

os.environ['FLASK_ENV'] = 'testing'

from app import app, db
from bakery_core.models import User, Product
from utils.email import send_pdf_email, send_order_email, customer_email_body
from utils.s3_storage import upload_product_image, ImageUploadError


def make_order(email='asha@priyumbakes.com'):
    return SimpleNamespace(
        id=3, invoice_number='INV-00003', customer_name='Asha <Kumar>', customer_email=email,
        customer_phone='98765', total=948, effective_order_date=date(2026, 10, 17),
    )


ITEMS = [SimpleNamespace(product_name='Walnut Brownies', quantity=2, total=898, is_bonus=False),
         SimpleNamespace(product_name='Brownie Bite (Free)', quantity=1, total=0, is_bonus=True)]
SETTINGS = SimpleNamespace(business_name='PRIYUM')


class EmailTestCase(unittest.TestCase):
    def setUp(self):
        self.ctx = app.app_context()
        self.ctx.push()

    def tearDown(self):
        app.config['MAIL_SERVER'] = None
        self.ctx.pop()

    def test_skips_without_mail_server(self):
        self.assertFalse(send_pdf_email('a@priyumbakes.com', 'Hi', '<p>x</p>', b'%PDF', 'x.pdf'))

    @patch('utils.email.smtplib.SMTP')
    def test_sends_with_attachment(self, mock_smtp):
        app.config['MAIL_SERVER'] = 'smtp.priyumbakes.com'
        server = mock_smtp.return_value.__enter__.return_value
        self.assertTrue(send_pdf_email('a@priyumbakes.com', 'Hi', '<p>x</p>', b'%PDF', 'x.pdf'))
        server.sendmail.assert_called_once()
        self.assertIn('filename=x.pdf', server.sendmail.call_args[0][2])

    @patch('utils.email.smtplib.SMTP', side_effect=smtplib.SMTPException("down"))
    def test_smtp_failure_returns_false(self, mock_smtp):
        app.config['MAIL_SERVER'] = 'smtp.priyumbakes.com'
        self.assertFalse(send_pdf_email('a@priyumbakes.com', 'Hi', '<p>x</p>', b'%PDF', 'x.pdf'))

    @patch('utils.email.send_pdf_email', return_value=True)
    def test_order_email_goes_to_customer_and_admin(self, mock_send):
        self.assertTrue(send_order_email(make_order(), ITEMS, b'%PDF', SETTINGS, admin_email='admin@priyumbakes.com'))
        recipients = [call.args[0] for call in mock_send.call_args_list]
        self.assertEqual(recipients, ['asha@priyumbakes.com', 'admin@priyumbakes.com'])

    @patch('utils.email.send_pdf_email', return_value=True)
    def test_order_email_without_customer_address(self, mock_send):
        send_order_email(make_order(email=None), ITEMS, b'%PDF', SETTINGS, admin_email='admin@priyumbakes.com')
        self.assertEqual(mock_send.call_count, 1)

    def test_body_escapes_customer_name(self):
        body = customer_email_body(make_order(), ITEMS, SETTINGS)
        self.assertIn('Asha &lt;Kumar&gt;', body)
        self.assertIn('Brownie Bite (Free) - Qty: 1 - FREE', body)


class ImageUploadTestCase(unittest.TestCase):
    def setUp(self):
        self.upload_dir = tempfile.mkdtemp()
        self.saved_folder = app.config['UPLOAD_FOLDER']
        app.config['UPLOAD_FOLDER'] = self.upload_dir

    def tearDown(self):
        app.config['UPLOAD_FOLDER'] = self.saved_folder
        app.config['AWS_S3_BUCKET'] = None
        shutil.rmtree(self.upload_dir)

    def image(self, name='cake.png'):
        return FileStorage(stream=BytesIO(b'\x89PNG'), filename=name, content_type='image/png')

    def test_saves_locally_without_bucket(self):
        with app.test_request_context():
            url = upload_product_image(self.image())
        self.assertTrue(url.startswith('/static/uploads/products/'))
        self.assertEqual(len(os.listdir(os.path.join(self.upload_dir, 'products'))), 1)

    def test_rejects_other_file_types(self):
        with app.test_request_context():
            with self.assertRaises(ImageUploadError):
                upload_product_image(self.image('notes.txt'))

    @patch('utils.s3_storage.get_s3_client')
    def test_uploads_to_s3_when_bucket_configured(self, mock_client):
        app.config['AWS_S3_BUCKET'] = 'priyum-images'
        with app.test_request_context():
            url = upload_product_image(self.image())
        mock_client.return_value.upload_fileobj.assert_called_once()
        self.assertTrue(url.startswith('https://priyum-images.s3.ap-south-1.amazonaws.com/products/'))


class CliTestCase(unittest.TestCase):
    def setUp(self):
        self.ctx = app.app_context()
        self.ctx.push()
        db.create_all()
        self.runner = app.test_cli_runner()

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.ctx.pop()

    def test_seed_products_is_idempotent(self):
        result = self.runner.invoke(args=['seed-products'])
        self.assertIn('Added 6 sample product(s).', result.output)
        self.runner.invoke(args=['seed-products'])
        self.assertEqual(db.session.execute(db.select(db.func.count(Product.id))).scalar(), 6)

    def test_create_admin(self):
        result = self.runner.invoke(args=['create-admin', 'Owner@PriyumBakes.com', 'secret123'])
        self.assertIn('Admin ready: owner@priyumbakes.com', result.output)
        user = db.session.execute(db.select(User).filter_by(email='owner@priyumbakes.com')).scalar_one()
        self.assertTrue(user.is_admin)
        self.assertIsNotNone(user.profile)


if __name__ == '__main__':
    unittest.main()
