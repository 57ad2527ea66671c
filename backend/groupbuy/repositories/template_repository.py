"""
Product Info Template Repository
"""
from typing import List, Optional

from psycopg2.extras import Json

from groupbuy.core.database import get_db_connection_dict
from groupbuy.domain.template import ProductInfoTemplate, TemplateWrite

TEMPLATE_COLUMNS = "id, name, fields, created_at, created_by"


def _fields_json(template: TemplateWrite) -> Json:
    return Json([field.model_dump(mode="json") for field in template.fields])


class TemplateRepository:

    def find_all(self) -> List[ProductInfoTemplate]:
        """All templates, newest first"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {TEMPLATE_COLUMNS}
                FROM product_info_templates
                ORDER BY created_at DESC
            """)
            return [ProductInfoTemplate(**row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, template_id: int) -> Optional[ProductInfoTemplate]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {TEMPLATE_COLUMNS}
                FROM product_info_templates
                WHERE id = %s
            """, (template_id,))

            row = cursor.fetchone()
            return ProductInfoTemplate(**row) if row else None

        finally:
            cursor.close()
            conn.close()

    def create(self, template: TemplateWrite, created_by: str) -> ProductInfoTemplate:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO product_info_templates (name, fields, created_by)
                VALUES (%s, %s, %s)
                RETURNING {TEMPLATE_COLUMNS}
            """, (template.name, _fields_json(template), created_by))

            row = cursor.fetchone()
            conn.commit()
            return ProductInfoTemplate(**row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, template_id: int, template: TemplateWrite) -> Optional[ProductInfoTemplate]:
        """Replace name and fields"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE product_info_templates
                SET name = %s,
                    fields = %s
                WHERE id = %s
                RETURNING {TEMPLATE_COLUMNS}
            """, (template.name, _fields_json(template), template_id))

            row = cursor.fetchone()
            conn.commit()
            return ProductInfoTemplate(**row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, template_id: int) -> bool:
        """Products using the template keep their values; the reference is nulled by FK"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM product_info_templates WHERE id = %s", (template_id,))
            deleted = cursor.rowcount > 0
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
