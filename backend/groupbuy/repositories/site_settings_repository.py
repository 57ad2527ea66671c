"""
Site Settings Repository
"""
from typing import Optional

from groupbuy.core.database import get_db_connection_dict
from groupbuy.domain.site_settings import SITE_SETTINGS_ID, SiteSettings, SiteSettingsUpdate


class SiteSettingsRepository:

    def get(self) -> Optional[SiteSettings]:
        """The settings row, or None if it was never saved"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT id, site_name, logo_url, updated_at, updated_by
                FROM site_settings
                WHERE id = %s
            """, (SITE_SETTINGS_ID,))

            row = cursor.fetchone()
            return SiteSettings(**row) if row else None

        finally:
            cursor.close()
            conn.close()

    def save(self, update: SiteSettingsUpdate, updated_by: str) -> SiteSettings:
        """Insert or overwrite the settings row"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO site_settings (id, site_name, logo_url, updated_by, updated_at)
                VALUES (%s, %s, %s, %s, NOW())
                ON CONFLICT (id) DO UPDATE SET
                    site_name = EXCLUDED.site_name,
                    logo_url = EXCLUDED.logo_url,
                    updated_by = EXCLUDED.updated_by,
                    updated_at = NOW()
                RETURNING id, site_name, logo_url, updated_at, updated_by
            """, (SITE_SETTINGS_ID, update.site_name, update.logo_url, updated_by))

            row = cursor.fetchone()
            conn.commit()
            return SiteSettings(**row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
