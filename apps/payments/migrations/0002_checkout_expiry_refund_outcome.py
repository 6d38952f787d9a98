from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("payments", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="payment",
            name="checkout_expires_at",
            field=models.DateTimeField(
                blank=True,
                help_text="When the latest Stripe Checkout Session for this payment closes.",
                null=True,
            ),
        ),
        migrations.AlterField(
            model_name="payment",
            name="stripe_checkout_session_id",
            field=models.CharField(blank=True, db_index=True, max_length=255),
        ),
        migrations.AlterField(
            model_name="paymentevent",
            name="outcome",
            field=models.CharField(
                choices=[
                    ("applied", "Applied"),
                    ("duplicate", "Duplicate, no change"),
                    ("ignored", "Ignored"),
                    ("invalid", "Invalid correlation data"),
                    ("refund_required", "Charged after the payment failed"),
                ],
                max_length=20,
            ),
        ),
    ]
