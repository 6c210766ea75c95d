from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import get_object_or_404, redirect
from django.utils.decorators import method_decorator
from django.utils.http import url_has_allowed_host_and_scheme
from django.views import View
from django.views.generic import TemplateView

from ..forms import PropertyStatusForm, SavedSearchForm
from ..models import Property, SavedSearch
from ..services.listings import FavoriteService, PropertyCatalogService, PropertyService, SavedSearchService
from ..services.profiles import ProfileService

__all__ = [
    "ProfileView",
    "FavoriteToggleView",
    "SavedSearchCreateView",
    "SavedSearchDeleteView",
]


def _safe_next(request, fallback: str) -> str:
    redirect_to = request.POST.get("next") or request.GET.get("next")
    if redirect_to and url_has_allowed_host_and_scheme(redirect_to, allowed_hosts={request.get_host()}):
        return redirect_to
    return fallback


@method_decorator(login_required(login_url="login"), name="dispatch")
class ProfileView(TemplateView):
    template_name = "profile/profile.html"
    service_class = ProfileService

    def dispatch(self, request, *args, **kwargs):
        if request.user.is_authenticated:
            self.service = self.service_class(request.user)
        return super().dispatch(request, *args, **kwargs)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        profile_form = kwargs.get("profile_form") or self.service.form()
        context.update(
            {
                "profile": self.service.profile,
                "profile_form": profile_form,
                "user_properties": PropertyService(self.request.user).user_properties(),
                "favorites": FavoriteService(self.request.user).favorites(),
                "saved_searches": SavedSearchService(self.request.user).saved_searches(),
                "status_choices": Property.STATUS_CHOICES,
                "status_form": PropertyStatusForm(),
            }
        )
        return context

    def post(self, request, *args, **kwargs):
        success, profile_form = self.service.update(request.POST)
        if success:
            messages.success(request, "Profile updated successfully.")
            return redirect("profile")
        messages.error(request, "Please correct the highlighted errors and try again.")
        return self.render_to_response(self.get_context_data(profile_form=profile_form))


@method_decorator(login_required(login_url="login"), name="dispatch")
class FavoriteToggleView(View):
    http_method_names = ["post"]
    service_class = FavoriteService

    def post(self, request, pk):
        listing = get_object_or_404(Property, pk=pk)
        if self.service_class(request.user).toggle(listing):
            messages.success(request, "Added to favorites.")
        else:
            messages.success(request, "Removed from favorites.")
        return redirect(_safe_next(request, listing.get_absolute_url()))


@method_decorator(login_required(login_url="login"), name="dispatch")
class SavedSearchCreateView(View):
    http_method_names = ["post"]
    service_class = SavedSearchService

    def post(self, request):
        form = SavedSearchForm(request.POST)
        if not form.is_valid():
            messages.error(request, "Please give your search a name.")
            return redirect(_safe_next(request, "profile"))
        filters = PropertyCatalogService().build_filters(request.POST)
        self.service_class(request.user).save(form.cleaned_data["name"], filters.as_criteria())
        messages.success(request, "Search saved.")
        return redirect(_safe_next(request, "profile"))


@method_decorator(login_required(login_url="login"), name="dispatch")
class SavedSearchDeleteView(View):
    http_method_names = ["post"]
    service_class = SavedSearchService

    def post(self, request, pk):
        search = get_object_or_404(SavedSearch, pk=pk, user=request.user)
        self.service_class(request.user).delete(search)
        messages.success(request, "Saved search removed.")
        return redirect("profile")
