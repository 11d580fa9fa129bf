"""
E-mail Templates and Constants

Subjects and bodies for alert and test e-mails. Alert bodies are rendered
with str.format(); all values are pre-formatted strings.
"""

ALERT_SUBJECT = "🚨 Price Alert: {coin_name}"

CONDITION_TEXT = {
    "above": "exceeded",
    "below": "dropped below",
}

CONDITION_EMOJI = {
    "above": "📈",
    "below": "📉",
}

ALERT_TEXT_TEMPLATE = """CryptoAlert - Price Alert Triggered!

{coin_name} has {condition_text} your target price.

Current Price: ${current_price}
Target Price: ${target_price}
Condition: Price {condition_text} target
Alert Created: {created_date}

This alert has been automatically disabled.
"""

ALERT_HTML_TEMPLATE = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
    <div style="background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 20px; text-align: center;">
        <h1>CryptoAlert {emoji}</h1>
        <p>Your price alert has been triggered!</p>
    </div>

    <div style="padding: 20px; background: #f8f9fa;">
        <h2 style="color: #333; margin-bottom: 20px;">Alert Details</h2>

        <div style="background: white; padding: 15px; border-radius: 8px; margin-bottom: 15px;">
            <p><strong>Cryptocurrency:</strong> {coin_name}</p>
            <p><strong>Current Price:</strong> ${current_price}</p>
            <p><strong>Target Price:</strong> ${target_price}</p>
            <p><strong>Condition:</strong> Price {condition_text} target</p>
            <p><strong>Alert Created:</strong> {created_date}</p>
        </div>

        <div style="text-align: center; margin-top: 20px;">
            <p style="color: #666; font-size: 14px;">
                This alert has been automatically disabled.<br>
                Visit your CryptoAlert dashboard to create new alerts.
            </p>
        </div>
    </div>

    <div style="background: #333; color: white; padding: 15px; text-align: center; font-size: 12px;">
        <p>CryptoAlert - Cryptocurrency Price Monitoring</p>
    </div>
</div>
"""

TEST_SUBJECT = "CryptoAlert Test Email"

TEST_TEXT = (
    "This is a test email from CryptoAlert. "
    "Your email configuration is working correctly!"
)

TEST_HTML = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
    <h2>CryptoAlert Test Email ✅</h2>
    <p>Congratulations! Your email configuration is working correctly.</p>
    <p>You will now receive email notifications when your price alerts are triggered.</p>
</div>
"""
