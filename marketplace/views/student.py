from django.contrib import messages
from django.contrib.auth import get_user_model
from django.contrib.auth.decorators import login_required
from django.http import Http404
from django.shortcuts import get_object_or_404, redirect
from django.utils.decorators import method_decorator
from django.views import View
from django.views.generic import TemplateView

from ..decorators import resident_required
from ..forms import MessageForm, StudentBookingForm
from ..models import Property, StudentDetail
from ..services.booking import BookingError, StudentBookingService, build_student_detail_values
from ..services.messaging import ChatError, RoommateChatService
from ..services.reviews import RoommateReviewService
from ..services.roommates import (
    SLEEP_SCHEDULES,
    STUDY_HABITS,
    RoommateFilters,
    RoommateMatchService,
    format_daily_routine,
)

__all__ = [
    "BookingSlotView",
    "StudentDashboardView",
    "RoommateChatView",
    "RoommateReviewView",
]


User = get_user_model()


@method_decorator(login_required(login_url="login"), name="dispatch")
class BookingSlotView(TemplateView):
    """Booking request form for a PG, or the stored booking when one exists."""

    template_name = "student/booking.html"
    service_class = StudentBookingService

    def dispatch(self, request, *args, **kwargs):
        self.listing = get_object_or_404(Property, pk=kwargs["pk"], listing_type="pg")
        if self.listing.status != "active" and not self._holds_booking(request.user):
            raise Http404("This PG is not taking bookings.")
        return super().dispatch(request, *args, **kwargs)

    def _holds_booking(self, user):
        return StudentDetail.objects.filter(user=user, property=self.listing).exists()

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        booking = self.service_class(self.request.user).booking_for(self.listing)
        editing = bool(self.request.GET.get("edit")) or booking is None
        form = kwargs.get("form")
        if form is None and editing:
            form = StudentBookingForm(initial=StudentBookingForm.initial_from(booking))
        context.update(
            {
                "listing": self.listing,
                "booking": booking,
                "booking_routine": format_daily_routine(booking) if booking else "",
                "form": form,
                "editing": form is not None,
            }
        )
        return context

    def post(self, request, *args, **kwargs):
        form = StudentBookingForm(request.POST)
        if not form.is_valid():
            for errors in form.errors.values():
                for error in errors:
                    messages.error(request, error)
            return self.render_to_response(self.get_context_data(form=form))

        service = self.service_class(request.user)
        try:
            service.submit(self.listing, build_student_detail_values(form.cleaned_data))
        except BookingError as exc:
            messages.error(request, str(exc))
            return self.render_to_response(self.get_context_data(form=form))

        messages.success(request, "Booking request submitted successfully!")
        return redirect("booking_slot", pk=self.listing.pk)


@method_decorator(login_required(login_url="login"), name="dispatch")
class StudentDashboardView(TemplateView):
    template_name = "student/dashboard.html"
    service_class = RoommateMatchService

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        current_details = StudentBookingService(self.request.user).student_details()
        service = self.service_class(self.request.user, current_details)
        filters = RoommateFilters.from_data(self.request.GET)
        context.update(
            {
                "current_details": current_details,
                "current_property": current_details.property if current_details else None,
                "filters": filters,
                "matches": service.matches(filters),
                "profile_gaps": service.profile_gaps(),
                "sleep_schedules": SLEEP_SCHEDULES,
                "study_habits": STUDY_HABITS,
            }
        )
        return context


@method_decorator(resident_required, name="dispatch")
class RoommateChatView(TemplateView):
    template_name = "student/chat.html"
    service_class = RoommateChatService

    def dispatch(self, request, *args, **kwargs):
        self.service = self.service_class(request.user, request.listing)
        return super().dispatch(request, *args, **kwargs)

    def _selected_partner(self, partners):
        raw = self.request.GET.get("with")
        if raw and raw.isdigit():
            return int(raw)
        return partners[0] if partners else None

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        all_messages = self.service.messages()
        partners = self.service.conversation_partners(all_messages)
        partner_id = self._selected_partner(partners)
        conversation = []
        if partner_id is not None:
            self.service.mark_conversation_read(partner_id)
            conversation = self.service.conversation(partner_id, all_messages)
        context.update(
            {
                "listing": self.request.listing,
                "partners": [(pid, self.service.identity_for(pid)) for pid in partners],
                "residents": self.service.residents(),
                "partner_id": partner_id,
                "partner": self.service.identity_for(partner_id) if partner_id is not None else None,
                "conversation": conversation,
                "form": kwargs.get("form") or MessageForm(initial={"recipient": partner_id}),
            }
        )
        return context

    def post(self, request, *args, **kwargs):
        form = MessageForm(request.POST)
        if not form.is_valid():
            messages.error(request, "Message cannot be empty.")
            return redirect("roommate_chat", pk=request.listing.pk)

        recipient = get_object_or_404(User, pk=form.cleaned_data["recipient"])
        try:
            self.service.send(recipient, form.cleaned_data["message"])
        except ChatError as exc:
            messages.error(request, str(exc))
        return redirect(f"{request.path}?with={recipient.pk}")


@method_decorator(resident_required, name="dispatch")
class RoommateReviewView(View):
    http_method_names = ["post"]
    service_class = RoommateReviewService

    def post(self, request, pk, user_id):
        roommate = get_object_or_404(User, pk=user_id)
        success, form, _review, eligibility = self.service_class(request.user).save(
            request.listing, roommate, request.POST
        )
        if success:
            messages.success(request, "Thanks for reviewing your roommate!")
        elif not eligibility.can_review:
            messages.error(request, eligibility.reason)
        else:
            for errors in form.errors.values():
                for error in errors:
                    messages.error(request, error)
        return redirect("property_detail", pk=request.listing.pk)
