from django.urls import path

from .views import ConfirmPaymentView, CreatePaymentIntentView, PaymentConfigView, StripeWebhookView

urlpatterns = [
    path("create-intent", CreatePaymentIntentView.as_view(), name="payment-create-intent"),
    path("confirm", ConfirmPaymentView.as_view(), name="payment-confirm"),
    path("config", PaymentConfigView.as_view(), name="payment-config"),
    path("webhook", StripeWebhookView.as_view(), name="stripe-webhook"),
]
