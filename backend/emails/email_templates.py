"""
Default transactional email templates.

Every template can be overridden by an email_tpl_* setting; these are the
fallbacks. Templates use {{var}} placeholders, see apply_email_vars().
"""

DEFAULT_SHOP_NAME = 'Warung Forza'
DEFAULT_ACCENT_COLOR = '#e11d48'

GLOBAL_LAYOUT = """<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"/><title>{{subject}}</title></head>
<body style="margin:0;padding:0;background:#f4f4f4;font-family:'Segoe UI',Arial,sans-serif;">
<table width="100%" cellpadding="0" cellspacing="0" style="background:#f4f4f4;padding:30px 0;">
<tr><td align="center">
<table width="600" cellpadding="0" cellspacing="0" style="background:#ffffff;border-radius:12px;overflow:hidden;box-shadow:0 4px 20px rgba(0,0,0,0.08);">
  <tr>
    <td style="background:{{accent_color}};padding:28px 40px;text-align:center;">
      <h1 style="margin:0;color:#fff;font-size:22px;font-weight:700;letter-spacing:0.5px;">{{shop_name}}</h1>
    </td>
  </tr>
  <tr>
    <td style="padding:36px 40px;color:#333;line-height:1.7;font-size:15px;">
      {{body_content}}
    </td>
  </tr>
  <tr>
    <td style="background:#f8f8f8;padding:20px 40px;text-align:center;border-top:1px solid #eee;">
      <p style="margin:0;font-size:12px;color:#aaa;">&copy; {{year}} {{shop_name}}. All rights reserved.<br>
      This is an automated email, please do not reply.</p>
    </td>
  </tr>
</table>
</td></tr>
</table>
</body>
</html>"""

PAYMENT_SUCCESS = """<p>Hi <strong>{{customer_name}}</strong>,</p>
<p>{{message}}</p>
<table style="width:100%;background:#f8f9fa;border-left:5px solid {{accent_color}};padding:16px;border-radius:4px;margin:20px 0;border-collapse:collapse;">
  <tr><td style="color:#666;font-size:13px;padding:6px 0;">Invoice No.</td><td style="font-weight:bold;text-align:right;">{{invoice_number}}</td></tr>
  <tr><td style="color:#666;font-size:13px;padding:6px 0;">Amount Paid</td><td style="font-weight:bold;text-align:right;font-size:16px;">{{amount}}</td></tr>
  <tr><td style="color:#666;font-size:13px;padding:6px 0;">Status</td><td style="font-weight:bold;text-align:right;color:{{accent_color}};">PAID</td></tr>
</table>
<div style="background:#e3f2fd;padding:14px;border-radius:8px;border:1px solid #bbdefb;margin-bottom:20px;">
  <p style="margin:0;color:#0d47a1;font-size:14px;"><strong>Next Step:</strong><br>{{next_step}}</p>
</div>
<p>Thank you for trusting us with your collection.<br><strong>{{shop_name}} Team</strong></p>"""

PO_ARRIVAL = """<p>Hi <strong>{{customer_name}}</strong>,</p>
<p>Great news! Your Pre-Order for <strong>{{product_name}}</strong> has arrived at our warehouse.</p>
<div style="background:#f8f9fa;padding:16px;border-left:5px solid #007bff;border-radius:4px;margin:20px 0;">
  <p style="margin:0;"><strong>Balance Due:</strong> <span style="font-size:18px;color:#dc3545;">{{balance}}</span></p>
  <p style="margin:8px 0 0;"><strong>Due Date:</strong> {{due_date}}</p>
</div>
<p>Please proceed with the balance payment so we can ship your item.</p>
<p>Log in to your account and go to <strong>My Orders</strong> to make your payment.</p>
<p>Thank you,<br><strong>{{shop_name}} Team</strong></p>"""

PO_ARRIVAL_FULL = """<p>Hi <strong>{{customer_name}}</strong>,</p>
<p>Your Pre-Order item <strong>{{product_name}}</strong> has arrived at our warehouse!</p>
<p>Since your order is already <strong>fully paid</strong>, we are now preparing the item for shipment.</p>
<p>You will receive a tracking number once the courier picks up your package.</p>
<p>Thank you,<br><strong>{{shop_name}} Team</strong></p>"""

REFUND = """<p>Hi <strong>{{customer_name}}</strong>,</p>
<p>Your refund for order <strong>#{{order_number}}</strong> has been successfully processed.</p>
<div style="background:#e8f5e9;padding:16px;border-left:4px solid #4caf50;border-radius:4px;margin:20px 0;">
  <p style="margin:0;"><strong>Refund Amount:</strong> {{amount}}</p>
  <p style="margin:8px 0 0;"><strong>Type:</strong> {{refund_type}}</p>
  <p style="margin:8px 0 0;"><strong>Reason:</strong> {{reason}}</p>
</div>
<p>Funds usually return to the original payment method within 3-5 business days.</p>
<p>Thank you,<br><strong>{{shop_name}} Team</strong></p>"""

WELCOME_OTP = """<p>Hi <strong>{{customer_name}}</strong>,</p>
<p>Welcome! Please verify your email address using the code below:</p>
<div style="text-align:center;margin:30px 0;">
  <span style="display:inline-block;background:#111;color:#fff;font-size:36px;font-weight:900;letter-spacing:12px;padding:16px 32px;border-radius:8px;">{{otp_code}}</span>
</div>
<p style="color:#888;font-size:13px;">This code expires in <strong>10 minutes</strong>. Do not share it with anyone.</p>
<p>Thank you,<br><strong>{{shop_name}} Team</strong></p>"""

RESET_PASSWORD = """<p>Hi <strong>{{customer_name}}</strong>,</p>
<p>We received a request to reset your password. Click the button below:</p>
<div style="text-align:center;margin:30px 0;">
  <a href="{{reset_link}}" style="display:inline-block;background:{{accent_color}};color:#fff;padding:14px 32px;border-radius:6px;text-decoration:none;font-weight:700;font-size:15px;">Reset Password</a>
</div>
<p style="color:#888;font-size:13px;">This link expires in <strong>1 hour</strong>. If you didn't request this, ignore this email.</p>
<p>Thank you,<br><strong>{{shop_name}} Team</strong></p>"""

# email type -> (subject setting key, default subject, body setting key, default body)
# Default subjects may reference {{shop_name}}.
EMAIL_TYPES = {
    'payment': (
        'email_tpl_payment_subject', 'Konfirmasi Pembayaran - {{shop_name}}',
        'email_tpl_payment_success', PAYMENT_SUCCESS,
    ),
    'po_arrival': (
        'email_tpl_po_arrival_subject', 'Pre-Order Anda Telah Tiba!',
        'email_tpl_po_arrival', PO_ARRIVAL,
    ),
    'po_full': (
        'email_tpl_po_full_subject', 'Pre-Order Lunas - Siap Kirim!',
        'email_tpl_po_arrival_full', PO_ARRIVAL_FULL,
    ),
    'refund': (
        'email_tpl_refund_subject', 'Konfirmasi Refund - {{shop_name}}',
        'email_tpl_refund', REFUND,
    ),
    'otp': (
        'email_tpl_otp_subject', 'Kode Verifikasi - {{shop_name}}',
        'email_tpl_welcome_otp', WELCOME_OTP,
    ),
    'reset_password': (
        'email_tpl_reset_password_subject', 'Reset Password - {{shop_name}}',
        'email_tpl_reset_password', RESET_PASSWORD,
    ),
}

DEFAULT_EMAIL_TYPE = 'payment'


def apply_email_vars(template, variables):
    """Replace every {{name}} placeholder whose name is in `variables`"""
    result = template
    for name, value in variables.items():
        result = result.replace('{{' + name + '}}', str(value))
    return result
