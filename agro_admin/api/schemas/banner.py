"""Home-screen banner payloads."""

from pydantic import BaseModel

from agro_admin.api.schemas.product import RecordId


class BannerRead(BaseModel):
    id: RecordId
    banner: str = ""

    def image_url(self, media_base_url: str) -> str:
        """Absolute URL of the banner image; the API returns a site-relative path."""
        if not self.banner or self.banner.startswith(("http://", "https://")):
            return self.banner
        return f"{media_base_url.rstrip('/')}/{self.banner.lstrip('/')}"
