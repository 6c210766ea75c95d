from django import forms

from ..models import PGFeedback, RoommateReview

RATING_CHOICES = [(value, f"{value} star{'s' if value != 1 else ''}") for value in range(1, 6)]


class PGFeedbackForm(forms.ModelForm):
    rating = forms.TypedChoiceField(choices=RATING_CHOICES, coerce=int, widget=forms.Select(attrs={"class": "form-select"}))

    class Meta:
        model = PGFeedback
        fields = ["rating", "feedback"]
        widgets = {
            "feedback": forms.Textarea(attrs={"class": "form-control", "rows": 3}),
        }


class RoommateReviewForm(forms.ModelForm):
    rating = forms.TypedChoiceField(choices=RATING_CHOICES, coerce=int, widget=forms.Select(attrs={"class": "form-select"}))

    class Meta:
        model = RoommateReview
        fields = ["rating", "feedback"]
        widgets = {
            "feedback": forms.Textarea(attrs={"class": "form-control", "rows": 3}),
        }
