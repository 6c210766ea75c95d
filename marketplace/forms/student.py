from django import forms

from ..models import StudentDetail

TIME_INPUT_FORMATS = ["%H:%M", "%H:%M:%S", "%I:%M %p", "%I %p"]

STUDY_HABIT_CHOICES = [
    ("", "Select study habit"),
    ("Morning", "Morning studier"),
    ("Evening", "Evening studier"),
    ("Flexible", "Flexible schedule"),
    ("Intensive (8+ hours)", "Intensive study (8+ hours)"),
]
ROOM_TYPE_CHOICES = [
    ("shared", "Shared room"),
    ("double", "Double sharing"),
    ("single", "Single room"),
]
RATING_CHOICES = [("", "No preference")] + [(str(value), str(value)) for value in range(1, 6)]
SLEEP_SCHEDULE_CHOICES = [
    ("", "No preference"),
    ("early", "Early bird (sleep by 10 PM)"),
    ("normal", "Normal (sleep by 12 AM)"),
    ("late", "Night owl (sleep after 12 AM)"),
]
GUEST_FREQUENCY_CHOICES = [
    ("", "No preference"),
    ("never", "Never"),
    ("occasionally", "Occasionally"),
    ("often", "Often"),
]


class StudentBookingForm(forms.Form):
    """Booking request for a PG slot.

    Move-in date, college name, degree and branch are required, checked in
    that order; only the first missing one is reported.
    """

    REQUIRED_IN_ORDER = (
        ("move_in_date", "Please select a move-in date"),
        ("college_name", "Please enter your college name"),
        ("degree", "Please enter your degree"),
        ("branch", "Please enter your branch"),
    )

    move_in_date = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date", "class": "form-control"}))
    move_out_date = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date", "class": "form-control"}))
    college_name = forms.CharField(required=False, max_length=255)
    degree = forms.CharField(required=False, max_length=255)
    branch = forms.CharField(required=False, max_length=255)
    course = forms.CharField(required=False, max_length=255)
    year_of_study = forms.CharField(required=False, max_length=50)
    emergency_contact = forms.CharField(required=False, max_length=255)
    wake_up_time = forms.TimeField(
        required=False,
        initial="07:00",
        input_formats=TIME_INPUT_FORMATS,
        widget=forms.TimeInput(format="%H:%M", attrs={"type": "time", "class": "form-control"}),
    )
    sleep_time = forms.TimeField(
        required=False,
        initial="23:00",
        input_formats=TIME_INPUT_FORMATS,
        widget=forms.TimeInput(format="%H:%M", attrs={"type": "time", "class": "form-control"}),
    )
    study_hours = forms.ChoiceField(required=False, choices=STUDY_HABIT_CHOICES)
    work_schedule = forms.CharField(required=False, max_length=255)
    extracurricular = forms.CharField(required=False, widget=forms.Textarea(attrs={"class": "form-control", "rows": 2}))
    room_type = forms.ChoiceField(required=False, choices=ROOM_TYPE_CHOICES, initial="shared")
    special_requests = forms.CharField(required=False, widget=forms.Textarea(attrs={"class": "form-control", "rows": 3}))
    cleanliness = forms.TypedChoiceField(required=False, choices=RATING_CHOICES, coerce=int, empty_value=None)
    noise = forms.TypedChoiceField(required=False, choices=RATING_CHOICES, coerce=int, empty_value=None)
    sleep_schedule = forms.ChoiceField(required=False, choices=SLEEP_SCHEDULE_CHOICES)
    guest_frequency = forms.ChoiceField(required=False, choices=GUEST_FREQUENCY_CHOICES)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field in self.fields.values():
            widget = field.widget
            if "class" in widget.attrs:
                continue
            css_class = "form-select" if isinstance(widget, forms.Select) else "form-control"
            widget.attrs["class"] = css_class

    @classmethod
    def initial_from(cls, booking: StudentDetail | None) -> dict:
        """Form initial values for editing an existing booking."""

        if booking is None:
            return {}
        routine = booking.daily_routine if isinstance(booking.daily_routine, dict) else {}
        preferences = booking.preferences if isinstance(booking.preferences, dict) else {}
        initial = {
            "move_in_date": booking.move_in_date,
            "move_out_date": booking.move_out_date,
            "college_name": booking.college_name,
            "degree": booking.degree,
            "branch": booking.branch,
            "course": booking.course,
            "year_of_study": booking.year_of_study,
            "emergency_contact": booking.emergency_contact,
            "work_schedule": routine.get("work_schedule") or "",
            "extracurricular": routine.get("extracurricular") or routine.get("extracurricular_activities") or "",
            "study_hours": routine.get("study_hours") or "",
            "room_type": preferences.get("room_type") or "shared",
            "special_requests": preferences.get("special_requests") or "",
        }
        for key in ("wake_up_time", "sleep_time"):
            if routine.get(key):
                initial[key] = routine[key]
        for key in ("cleanliness", "noise", "sleep_schedule", "guest_frequency"):
            if preferences.get(key) not in (None, ""):
                initial[key] = preferences[key]
        return initial

    def _clean_time_label(self, field_name: str) -> str:
        value = self.cleaned_data.get(field_name)
        return value.strftime("%H:%M") if value else ""

    def clean_wake_up_time(self):
        return self._clean_time_label("wake_up_time")

    def clean_sleep_time(self):
        return self._clean_time_label("sleep_time")

    def clean(self):
        cleaned_data = super().clean()
        for field_name, message in self.REQUIRED_IN_ORDER:
            if field_name in self.errors:
                return cleaned_data
            if not cleaned_data.get(field_name):
                self.add_error(field_name, message)
                return cleaned_data

        move_in = cleaned_data.get("move_in_date")
        move_out = cleaned_data.get("move_out_date")
        if move_in and move_out and move_out < move_in:
            self.add_error("move_out_date", "Move-out date cannot be before move-in date.")
        return cleaned_data
