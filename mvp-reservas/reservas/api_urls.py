"""
Propósito:
    Registrar rutas REST bajo ``/api/`` enlazándolas con las vistas correspondientes.
Qué expone:
    Un ``DefaultRouter`` para catálogo, reservas y notificaciones más rutas de autenticación JWT.
Permisos:
    Delegados completamente en las vistas; aquí solo se conectan endpoints ya protegidos.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from accounts.api import MeView
from bookings.api import ReservationViewSet
from catalog.api import ResourceTypeViewSet, ResourceViewSet
from notifications.api import NotificationViewSet

router = DefaultRouter()
router.register("tipos-recursos", ResourceTypeViewSet, basename="resource-type")
router.register("recursos", ResourceViewSet, basename="resource")
router.register("reservas", ReservationViewSet, basename="reservation")
router.register("notificaciones", NotificationViewSet, basename="notification")

urlpatterns = [
    path("login/", TokenObtainPairView.as_view(), name="token_obtain"),
    path("auth/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("me/", MeView.as_view(), name="auth_me"),
    path("", include(router.urls)),
]
