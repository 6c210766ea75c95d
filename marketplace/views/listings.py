from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect
from django.urls import reverse_lazy
from django.utils.decorators import method_decorator
from django.views import View
from django.views.generic import FormView, TemplateView

from ..decorators import listing_owner_required
from ..forms import AMENITY_CHOICES, PropertyForm, PropertyStatusForm
from ..services.booking import PropertyResidentsService
from ..services.listings import PropertyService
from ..services.roommates import student_identity


@method_decorator(login_required(login_url="login"), name="dispatch")
class PropertyCreateView(FormView):
    template_name = "listings/form.html"
    form_class = PropertyForm
    success_url = reverse_lazy("profile")
    service_class = PropertyService
    initial_listing_type = "sale"
    page_title = "List your property"

    def get_initial(self):
        initial = super().get_initial()
        initial.setdefault("listing_type", self.initial_listing_type)
        if self.initial_listing_type == "pg":
            initial.setdefault("property_type", "pg")
        return initial

    def get_service(self) -> PropertyService:
        return self.service_class(self.request.user)

    def form_valid(self, form):
        self.get_service().create(form)
        messages.success(self.request, "Property listed successfully.")
        return super().form_valid(form)

    def form_invalid(self, form):
        messages.error(self.request, "Please review the errors below.")
        return super().form_invalid(form)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["amenity_choices"] = AMENITY_CHOICES
        context["page_title"] = self.page_title
        return context


class AddPGListingView(PropertyCreateView):
    initial_listing_type = "pg"
    page_title = "List your PG"


@method_decorator(listing_owner_required, name="dispatch")
class PropertyUpdateView(FormView):
    template_name = "listings/form.html"
    form_class = PropertyForm
    success_url = reverse_lazy("profile")
    service_class = PropertyService

    def get_form_kwargs(self):
        kwargs = super().get_form_kwargs()
        kwargs["instance"] = self.request.listing
        return kwargs

    def form_valid(self, form):
        self.service_class(self.request.user).update(self.request.listing, form)
        messages.success(self.request, "Property updated successfully.")
        return super().form_valid(form)

    def form_invalid(self, form):
        messages.error(self.request, "Please review the errors below.")
        return super().form_invalid(form)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context.update(
            {
                "amenity_choices": AMENITY_CHOICES,
                "page_title": f"Edit {self.request.listing.title}",
                "listing": self.request.listing,
            }
        )
        return context


@method_decorator(listing_owner_required, name="dispatch")
class PropertyStatusView(View):
    http_method_names = ["post"]

    def post(self, request, pk):
        form = PropertyStatusForm(request.POST)
        if not form.is_valid():
            messages.error(request, "Invalid status requested.")
            return redirect("profile")
        PropertyService(request.user).set_status(request.listing, form.cleaned_data["status"])
        messages.success(request, "Property updated successfully.")
        return redirect("profile")


@method_decorator(listing_owner_required, name="dispatch")
class PropertyDeleteView(View):
    http_method_names = ["post"]

    def post(self, request, pk):
        PropertyService(request.user).delete(request.listing)
        messages.success(request, "Property removed successfully.")
        return redirect("profile")


@method_decorator(listing_owner_required, name="dispatch")
class PropertyResidentsView(TemplateView):
    template_name = "listings/residents.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        residents = list(PropertyResidentsService(self.request.user).residents(self.request.listing))
        context.update(
            {
                "listing": self.request.listing,
                "residents": [(resident, student_identity(resident)) for resident in residents],
            }
        )
        return context
