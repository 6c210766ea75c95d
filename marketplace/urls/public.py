"""Public catalog, detail and authentication URL patterns."""

from django.urls import path

from ..views import public

urlpatterns = [
    path("", public.HomeView.as_view(), name="home"),
    path("buy/", public.BuyView.as_view(), name="buy"),
    path("rent/", public.RentView.as_view(), name="rent"),
    path("student-pg/", public.StudentPGView.as_view(), name="student_pg"),
    path("about/", public.AboutView.as_view(), name="about"),
    path("property/<int:pk>/", public.PropertyDetailView.as_view(), name="property_detail"),
    path("login/", public.LoginView.as_view(), name="login"),
    path("logout/", public.LogoutView.as_view(), name="logout"),
    path("register/", public.RegisterView.as_view(), name="register"),
]
