# order_tracking/core/messages.py
"""
Fixed user-facing messages (Arabic storefront).

Routes only ever return one of these; upstream error detail stays in the logs.
"""

ORDER_NOT_FOUND = "لم يتم العثور على الطلب"
FETCH_ORDER_FAILED = "حدث خطأ أثناء جلب بيانات الطلب"

NO_FILE_UPLOADED = "لم يتم تحميل أي ملف"
UNSUPPORTED_FILE_TYPE = "نوع الملف غير مدعوم. يرجى تحميل صورة فقط (JPG, PNG, WEBP)."
FILE_TOO_LARGE = "حجم الملف كبير جداً"
UPLOAD_SUCCEEDED = "تم رفع إيصال الدفع بنجاح"
UPLOAD_FAILED = "حدث خطأ أثناء رفع الملف"

CONFIRM_SUCCEEDED = "تم تأكيد الدفع بنجاح"
CONFIRM_FAILED = "حدث خطأ أثناء تأكيد الدفع"

CANNOT_CANCEL = "لا يمكن إلغاء الطلب بعد مرور 3 أيام"
CANCEL_SUCCEEDED = "تم إلغاء الطلب بنجاح"
CANCEL_FAILED = "حدث خطأ أثناء إلغاء الطلب"

INVALID_REQUEST = "طلب غير صالح"
INTERNAL_ERROR = "حدث خطأ غير متوقع"
NOT_FOUND = "المسار المطلوب غير موجود"
METHOD_NOT_ALLOWED = "الطريقة غير مسموح بها"
