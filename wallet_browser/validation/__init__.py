from .record_validation import validate_record_dict

__all__ = ["validate_record_dict"]
