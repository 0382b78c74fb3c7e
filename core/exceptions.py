from rest_framework.exceptions import APIException


class ValidationFailedError(APIException):

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        self.status_code = 400
        self.detail = "Validation failed: {}".format(", ".join(self.errors))


class NotFoundError(APIException):

    def __init__(self, entity="Record"):
        self.status_code = 404
        self.detail = "{} not found".format(entity)


class DuplicateRecordError(APIException):

    def __init__(self, message):
        self.status_code = 409
        self.detail = message


class TourFullError(APIException):

    def __init__(self):
        self.status_code = 409
        self.detail = "Selected tour is full"


class CourseInUseError(APIException):

    def __init__(self, count):
        self.status_code = 409
        self.detail = "Cannot delete course: {} tournament(s) still reference this course. " \
                      "Use cascade or replacement_course.".format(count)


class TierInUseError(APIException):

    def __init__(self, count):
        self.status_code = 409
        self.detail = "Cannot delete tier: {} tournament(s) still reference this tier. " \
                      "Use reassign_to.".format(count)


class MemberMergeError(APIException):

    def __init__(self, message):
        self.status_code = 409
        self.detail = message


class TooManyRecordsError(APIException):

    def __init__(self, count, limit):
        self.status_code = 400
        self.detail = "Operation would affect {} records, which exceeds the limit of {}".format(count, limit)


class InvalidAmountError(APIException):

    def __init__(self, message):
        self.status_code = 400
        self.detail = message
