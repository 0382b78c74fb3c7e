import factory
from factory.django import DjangoModelFactory

from courses.models import Course


class CourseFactory(DjangoModelFactory):
    class Meta:
        model = Course

    api_id = factory.Sequence(lambda n: f"course-{n}")
    name = factory.Sequence(lambda n: f"Golf Club {n}")
    location = "Ponte Vedra Beach, FL"
    par = 72
    front = 36
    back = 36
    time_zone_offset = -5
