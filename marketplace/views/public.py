from django.contrib import messages
from django.contrib.auth import login, logout
from django.contrib.auth.forms import AuthenticationForm
from django.db.models import Q
from django.shortcuts import redirect
from django.urls import reverse_lazy
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.generic import DetailView, FormView, RedirectView, TemplateView

from ..forms import AMENITY_CHOICES, RegisterForm, SavedSearchForm
from ..models import Property
from ..services.listings import FavoriteService, PropertyCatalogService
from ..services.reviews import PGFeedbackService, RoommateReviewService


class HomeView(TemplateView):
    template_name = "public/home.html"
    catalog_service_class = PropertyCatalogService
    FEATURED_LIMIT = 6

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        service = self.catalog_service_class()
        catalog = service.get_catalog(service.build_filters({}))
        context.update(
            {
                "featured": catalog.exclude(listing_type="pg")[: self.FEATURED_LIMIT],
                "pg_listings": catalog.filter(listing_type="pg")[: self.FEATURED_LIMIT],
            }
        )
        return context


class ListingCatalogView(TemplateView):
    """Filterable catalog for one listing type."""

    template_name = "public/catalog.html"
    catalog_service_class = PropertyCatalogService
    listing_type = ""
    page_title = "Properties"
    property_type_choices = Property.PROPERTY_TYPE_CHOICES

    def get_catalog_service(self) -> PropertyCatalogService:
        return self.catalog_service_class()

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        service = self.get_catalog_service()
        filters = service.build_filters(self.request.GET, listing_type=self.listing_type)
        properties = list(service.get_catalog(filters))
        favorite_ids = set()
        if self.request.user.is_authenticated:
            favorite_ids = FavoriteService(self.request.user).favorite_ids(properties)
        context.update(
            {
                "page_title": self.page_title,
                "properties": properties,
                "filters": filters,
                "favorite_ids": favorite_ids,
                "property_type_choices": self.property_type_choices,
                "amenity_choices": AMENITY_CHOICES,
                "bedroom_choices": [1, 2, 3, 4, 5],
                "saved_search_form": SavedSearchForm(),
                "listing_type": self.listing_type,
            }
        )
        return context


class BuyView(ListingCatalogView):
    listing_type = "sale"
    page_title = "Properties for sale"
    property_type_choices = [choice for choice in Property.PROPERTY_TYPE_CHOICES if choice[0] != "pg"]


class RentView(ListingCatalogView):
    listing_type = "rent"
    page_title = "Properties for rent"
    property_type_choices = [choice for choice in Property.PROPERTY_TYPE_CHOICES if choice[0] != "pg"]


class StudentPGView(ListingCatalogView):
    listing_type = "pg"
    page_title = "Student PG accommodation"
    property_type_choices = []


class AboutView(TemplateView):
    template_name = "public/about.html"


class LoginView(FormView):
    template_name = "auth/login.html"
    form_class = AuthenticationForm
    success_url = reverse_lazy("home")

    def get_form_kwargs(self):
        kwargs = super().get_form_kwargs()
        kwargs["request"] = self.request
        return kwargs

    def get_success_url(self):
        redirect_to = self.request.POST.get("next") or self.request.GET.get("next")
        if redirect_to and url_has_allowed_host_and_scheme(redirect_to, allowed_hosts={self.request.get_host()}):
            return redirect_to
        return super().get_success_url()

    def form_valid(self, form):
        login(self.request, form.get_user())
        return super().form_valid(form)

    def form_invalid(self, form):
        messages.error(self.request, "Invalid username or password.")
        return self.render_to_response(self.get_context_data(form=form))


class LogoutView(RedirectView):
    pattern_name = "home"

    def get(self, request, *args, **kwargs):
        logout(request)
        return super().get(request, *args, **kwargs)

    def post(self, request, *args, **kwargs):
        logout(request)
        return super().get(request, *args, **kwargs)


class RegisterView(FormView):
    template_name = "auth/register.html"
    form_class = RegisterForm
    success_url = reverse_lazy("login")

    def form_valid(self, form):
        form.save()
        messages.success(self.request, "Registration successful. Please log in.")
        return super().form_valid(form)

    def form_invalid(self, form):
        messages.error(self.request, "Please correct the highlighted errors.")
        return self.render_to_response(self.get_context_data(form=form))


class PropertyDetailView(DetailView):
    template_name = "public/detail.html"
    model = Property
    context_object_name = "listing"

    def get_queryset(self):
        queryset = Property.objects.prefetch_related("images")
        user = self.request.user
        if user.is_authenticated:
            return queryset.filter(Q(status="active") | Q(owner=user))
        return queryset.filter(status="active")

    def get_feedback_service(self) -> PGFeedbackService:
        return PGFeedbackService(self.request.user)

    def get_context_data(self, **kwargs):
        feedback_form = kwargs.pop("feedback_form", None)
        eligibility = kwargs.pop("feedback_eligibility", None)

        context = super().get_context_data(**kwargs)
        feedback_service = self.get_feedback_service()
        if eligibility is None:
            eligibility = feedback_service.eligibility(self.object)
        if eligibility.can_review:
            feedback_form = feedback_form or feedback_service.form(self.object)
        else:
            feedback_form = None

        is_favorite = False
        if self.request.user.is_authenticated:
            is_favorite = FavoriteService(self.request.user).is_favorite(self.object)

        context.update(
            {
                "is_favorite": is_favorite,
                "is_owner": self.request.user.is_authenticated and self.object.owner_id == self.request.user.pk,
                "feedback": feedback_service.feedback_for(self.object),
                "feedback_form": feedback_form,
                "user_can_review": eligibility.can_review,
                "review_eligibility_reason": eligibility.reason,
                "roommate_reviews": RoommateReviewService(self.request.user).reviews_for(self.object)
                if self.object.listing_type == "pg"
                else [],
            }
        )
        return context

    def post(self, request, *args, **kwargs):
        self.object = self.get_object()
        feedback_service = self.get_feedback_service()
        existing = feedback_service.user_feedback(self.object)
        success, form, feedback, eligibility = feedback_service.save(self.object, request.POST)

        if success:
            if existing:
                messages.success(request, "Your feedback has been updated.")
            else:
                messages.success(request, "Thanks for reviewing this PG!")
            return redirect(request.path)

        if not eligibility.can_review:
            messages.error(request, eligibility.reason or "You are not allowed to review this PG.")
            return redirect(request.path)

        context = self.get_context_data(feedback_form=form, feedback_eligibility=eligibility)
        return self.render_to_response(context)
