import django_filters
from django.contrib.auth.models import User
from django.db.models import Q

from testprep.models import Course, Exam, UserProfile


class CourseFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search')
    level = django_filters.CharFilter(method='filter_level')

    class Meta:
        model = Course
        fields = []

    def filter_search(self, queryset, name, value):
        return queryset.filter(title__icontains=value)

    def filter_level(self, queryset, name, value):
        # "all" is what the catalog page sends for no filter
        if value == 'all':
            return queryset
        return queryset.filter(level=value)


class ExamFilter(django_filters.FilterSet):
    courseId = django_filters.NumberFilter(field_name='course_id')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Exam
        fields = []

    def filter_search(self, queryset, name, value):
        return queryset.filter(Q(title__icontains=value) | Q(description__icontains=value))


class UserFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search')
    role = django_filters.ChoiceFilter(field_name='profile__role', choices=UserProfile.Role.choices)

    class Meta:
        model = User
        fields = []

    def filter_search(self, queryset, name, value):
        return queryset.filter(Q(email__icontains=value) | Q(profile__full_name__icontains=value))
