"""Uzbek/Russian label lookup for notifications and export headers."""

from __future__ import annotations

from agro_admin.core.config import SUPPORTED_LANGUAGES

# Keys are the English texts; a missing key is rendered as-is.
TRANSLATIONS: dict[str, dict[str, str]] = {
    "uz": {
        "Created successfully": "Muvaffaqiyatli yaratildi",
        "Updated successfully": "Muvaffaqiyatli yangilandi",
        "Deleted successfully": "Muvaffaqiyatli o'chirildi",
        "Record was already deleted": "Yozuv allaqachon o'chirilgan",
        "Failed to load data": "Ma'lumotlarni yuklab bo'lmadi",
        "Failed to save": "Saqlab bo'lmadi",
        "Failed to delete": "O'chirib bo'lmadi",
        "Authentication required": "Avtorizatsiya talab qilinadi",
        "Logged in": "Tizimga kirildi",
        "Logged out": "Tizimdan chiqildi",
        "This field is required": "Bu maydon to'ldirilishi shart",
        "Enter a valid number": "To'g'ri son kiriting",
        "Value cannot be negative": "Qiymat manfiy bo'lishi mumkin emas",
        "Unexpected response from server": "Serverdan kutilmagan javob",
        "Nothing to export": "Eksport uchun ma'lumot yo'q",
        "Order №": "Buyurtma №",
        "Customer": "Mijoz",
        "Product code": "Mahsulot kodi",
        "Product": "Mahsulot",
        "Quantity": "Miqdori",
        "Unit": "O'lchov birligi",
        "Catalog price": "Katalog narxi",
        "Charged price": "Sotilgan narx",
        "Date": "Sana",
        "Orders": "Buyurtmalar",
    },
    "ru": {
        "Created successfully": "Успешно создано",
        "Updated successfully": "Успешно обновлено",
        "Deleted successfully": "Успешно удалено",
        "Record was already deleted": "Запись уже удалена",
        "Failed to load data": "Не удалось загрузить данные",
        "Failed to save": "Не удалось сохранить",
        "Failed to delete": "Не удалось удалить",
        "Authentication required": "Требуется авторизация",
        "Logged in": "Вход выполнен",
        "Logged out": "Выход выполнен",
        "This field is required": "Это поле обязательно",
        "Enter a valid number": "Введите корректное число",
        "Value cannot be negative": "Значение не может быть отрицательным",
        "Unexpected response from server": "Неожиданный ответ сервера",
        "Nothing to export": "Нет данных для экспорта",
        "Order №": "Заказ №",
        "Customer": "Клиент",
        "Product code": "Код товара",
        "Product": "Товар",
        "Quantity": "Количество",
        "Unit": "Ед. изм.",
        "Catalog price": "Цена по каталогу",
        "Charged price": "Цена продажи",
        "Date": "Дата",
        "Orders": "Заказы",
    },
}


class Translator:
    """Read-only lookup bound to the currently selected language."""

    def __init__(self, language: str = "uz", translations: dict[str, dict[str, str]] | None = None):
        self._translations = translations if translations is not None else TRANSLATIONS
        self._language = "uz"
        self.set_language(language)

    @property
    def language(self) -> str:
        return self._language

    def set_language(self, language: str) -> None:
        code = (language or "").strip().lower()
        if code not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language '{language}'")
        self._language = code

    def t(self, key: str) -> str:
        return self._translations.get(self._language, {}).get(key, key)
