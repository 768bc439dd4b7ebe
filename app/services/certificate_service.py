"""
Certificate Service
Issuing, rendering (Pillow + img2pdf) and public verification of certificates
"""

import logging
import uuid
from io import BytesIO
from typing import List, Optional, Tuple

import img2pdf
from PIL import Image, ImageDraw, ImageFont
from fastapi import HTTPException, status

from app.config import settings
from app.database import database, update_row
from app.services.event_service import event_service
from app.services.notification_service import notification_service
from app.services.order_service import order_service
from app.services.storage_service import storage_service
from app.utils.datetime_ist import IST, ensure_datetime, utc_now
from app.utils.serializers import serialize_row, serialize_rows
from app.utils.uid import generate_certificate_uid

logger = logging.getLogger(__name__)

# A4 landscape at 96 dpi
CANVAS_SIZE = (1123, 794)
CERTIFICATE_TYPES = ("participation", "winning")

NAVY = (31, 78, 121)
GOLD = (191, 144, 0)
INK = (40, 40, 40)

FONT_CANDIDATES = {
    True: ("DejaVuSans-Bold.ttf", "arialbd.ttf", "Arial Bold.ttf"),
    False: ("DejaVuSans.ttf", "arial.ttf", "Arial.ttf"),
}


class CertificateService:
    """Service for certificate operations"""

    @staticmethod
    def _load_font(font_size: int, bold: bool = False) -> ImageFont.ImageFont:
        for candidate in FONT_CANDIDATES[bold]:
            try:
                return ImageFont.truetype(candidate, font_size)
            except OSError:
                continue
        return ImageFont.load_default()

    @staticmethod
    def _centered(draw: ImageDraw.ImageDraw, y: int, text: str, font, fill):
        bbox = draw.textbbox((0, 0), text, font=font)
        x = (CANVAS_SIZE[0] - (bbox[2] - bbox[0])) // 2
        draw.text((x, y), text, fill=fill, font=font)

    @staticmethod
    def certificate_lines(certificate: dict) -> dict:
        """Text shown on a certificate (shared by the PDF and HTML renderings)"""
        winning = certificate.get("certificate_type") == "winning"
        issued = ensure_datetime(certificate.get("issue_date")) or utc_now()
        if winning and certificate.get("position"):
            achievement = f"for securing {certificate['position']} position in"
        else:
            achievement = "for participating in"
        return {
            "title": "CERTIFICATE OF ACHIEVEMENT" if winning else "CERTIFICATE OF PARTICIPATION",
            "presented_to": "This certificate is proudly presented to",
            "name": certificate["participant_name"],
            "achievement": achievement,
            "event_name": certificate["event_name"],
            "sport": certificate.get("sport_name") or "",
            "issue_date": issued.astimezone(IST).strftime("%d %B %Y"),
            "unique_id": certificate["unique_id"],
            "verify_url": f"{settings.APP_URL}/api/certificates/verify/{certificate['unique_id']}",
            "app_name": settings.APP_NAME,
        }

    @staticmethod
    def render_pdf(certificate: dict) -> bytes:
        """Draw the certificate on an A4 landscape canvas and wrap it in a PDF"""
        lines = CertificateService.certificate_lines(certificate)
        image = Image.new("RGB", CANVAS_SIZE, "white")
        draw = ImageDraw.Draw(image)

        width, height = CANVAS_SIZE
        draw.rectangle([20, 20, width - 20, height - 20], outline=NAVY, width=8)
        draw.rectangle([40, 40, width - 40, height - 40], outline=GOLD, width=2)

        CertificateService._centered(draw, 90, lines["app_name"].upper(), CertificateService._load_font(26, True), NAVY)
        CertificateService._centered(draw, 150, lines["title"], CertificateService._load_font(44, True), GOLD)
        CertificateService._centered(draw, 250, lines["presented_to"], CertificateService._load_font(24), INK)
        CertificateService._centered(draw, 310, lines["name"], CertificateService._load_font(54, True), NAVY)
        CertificateService._centered(draw, 410, lines["achievement"], CertificateService._load_font(24), INK)
        CertificateService._centered(draw, 460, lines["event_name"], CertificateService._load_font(34, True), INK)
        if lines["sport"]:
            CertificateService._centered(draw, 515, lines["sport"], CertificateService._load_font(24), INK)

        small = CertificateService._load_font(18)
        draw.text((80, height - 120), f"Date: {lines['issue_date']}", fill=INK, font=small)
        draw.text((80, height - 90), f"Certificate ID: {lines['unique_id']}", fill=INK, font=small)

        img_buffer = BytesIO()
        image.save(img_buffer, format="PNG")
        return img2pdf.convert(img_buffer.getvalue())

    @staticmethod
    async def _create_certificate(
        student: dict,
        event: dict,
        certificate_type: str,
        issued_by: str,
        position: Optional[str] = None,
        registration_order_id: Optional[str] = None
    ) -> dict:
        unique_id = await generate_certificate_uid(event["unique_id"], student["unique_id"])
        certificate = {
            "id": str(uuid.uuid4()),
            "unique_id": unique_id,
            "student_id": str(student["id"]),
            "event_id": str(event["id"]),
            "registration_order_id": registration_order_id,
            "issued_by": issued_by,
            "certificate_type": certificate_type,
            "position": position,
            "participant_name": student["name"],
            "sport_name": event["sport"],
            "event_name": event["name"],
            "issue_date": utc_now(),
        }

        pdf_bytes = CertificateService.render_pdf(certificate)
        certificate["certificate_url"] = await storage_service.save_bytes(
            f"certificates/{event['id']}/{unique_id}.pdf", pdf_bytes, "application/pdf"
        )

        await database.execute(
            """
            INSERT INTO certificates (
                id, unique_id, student_id, event_id, registration_order_id, issued_by, certificate_type,
                position, participant_name, sport_name, event_name, certificate_url, issue_date, created_at
            )
            VALUES (
                :id, :unique_id, :student_id, :event_id, :registration_order_id, :issued_by, :certificate_type,
                :position, :participant_name, :sport_name, :event_name, :certificate_url, :issue_date, :issue_date
            )
            """,
            certificate
        )

        await notification_service.notify(
            student["user_id"], "CERTIFICATE_ISSUED", "Certificate issued",
            f"Your {certificate_type} certificate for {event['name']} is ready",
            {"certificateId": unique_id, "eventId": str(event["id"])}
        )
        return certificate

    @staticmethod
    async def _registered_students(event_id: str, student_ids: List[str]) -> dict:
        params = {"eid": str(event_id)}
        slots = []
        for i, sid in enumerate(student_ids):
            params[f"sid_{i}"] = str(sid)
            slots.append(f":sid_{i}")
        rows = await database.fetch_all(
            f"""
            SELECT s.id, s.name, s.user_id, u.unique_id
            FROM event_registrations r
            JOIN students s ON s.id = r.student_id
            JOIN users u ON u.id = s.user_id
            WHERE r.event_id = :eid AND r.student_id IN ({', '.join(slots)})
            """,
            params
        )
        return {str(r["id"]): dict(r) for r in rows}

    @staticmethod
    async def issue_certificates(
        current_user: dict,
        event_id: str,
        student_ids: List[str],
        certificate_type: str = "participation",
        positions: Optional[dict] = None
    ) -> dict:
        """
        Issue certificates to registered students of the coach's event

        The number issued is capped by certificates bought in paid orders.
        """
        if certificate_type not in CERTIFICATE_TYPES:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid certificate type")
        student_ids = list(dict.fromkeys(str(s) for s in (student_ids or [])))
        if not student_ids:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Select at least one student")

        positions = {str(k): v for k, v in (positions or {}).items()}
        if certificate_type == "winning":
            missing = [s for s in student_ids if not positions.get(s)]
            if missing:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="A position is required for every student receiving a winning certificate"
                )

        event = await event_service.get_event_row(event_id)
        if str(event["created_by"]) != current_user["id"]:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only issue certificates for your own events"
            )

        registered = await CertificateService._registered_students(event["id"], student_ids)
        unregistered = [s for s in student_ids if s not in registered]
        if unregistered:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{len(unregistered)} students are not registered for this event"
            )

        params = {"eid": str(event["id"]), "ctype": certificate_type}
        slots = []
        for i, sid in enumerate(student_ids):
            params[f"sid_{i}"] = sid
            slots.append(f":sid_{i}")
        holders = await database.fetch_all(
            f"""
            SELECT participant_name FROM certificates
            WHERE event_id = :eid AND certificate_type = :ctype AND student_id IN ({', '.join(slots)})
            """,
            params
        )
        if holders:
            names = ", ".join(r["participant_name"] for r in holders)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Certificate already issued to: {names}"
            )

        allowance = await order_service.paid_certificate_allowance(event["id"], current_user["profile"]["id"])
        issued = await database.fetch_val(
            "SELECT COUNT(*) FROM certificates WHERE event_id = :eid AND issued_by = :uid",
            {"eid": str(event["id"]), "uid": current_user["id"]}
        )
        remaining = allowance - int(issued or 0)
        if len(student_ids) > remaining:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=(
                    f"Only {max(remaining, 0)} certificates available from paid orders for this event. "
                    "Place or pay for a certificate order first."
                )
            )

        created = []
        for sid in student_ids:
            certificate = await CertificateService._create_certificate(
                registered[sid], event, certificate_type, current_user["id"], positions.get(sid)
            )
            created.append(certificate)

        logger.info("[CERT] %d %s certificates issued for %s", len(created), certificate_type, event["unique_id"])
        return {
            "message": f"{len(created)} certificates issued",
            "certificates": serialize_rows(created, exclude=("certificate_url",)),
            "remaining": remaining - len(created),
        }

    @staticmethod
    async def generate_for_registration_order(admin: dict, order_id: str) -> dict:
        """Participation certificates for every student on a paid registration order"""
        order = await database.fetch_one("SELECT * FROM registration_orders WHERE id = :id", {"id": order_id})
        if not order:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Registration order not found")
        if order["payment_status"] != "PAID":
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Order has not been paid")

        event = await event_service.get_event_row(str(order["event_id"]))
        if event["status"] != "COMPLETED":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Certificates can only be generated after the event is completed"
            )

        items = await database.fetch_all(
            """
            SELECT s.id, s.name, s.user_id, u.unique_id
            FROM registration_order_items i
            JOIN students s ON s.id = i.student_id
            JOIN users u ON u.id = s.user_id
            WHERE i.registration_order_id = :oid
            """,
            {"oid": order_id}
        )

        generated, reused = [], 0
        for item in items:
            existing = await database.fetch_one(
                """
                SELECT * FROM certificates
                WHERE event_id = :eid AND student_id = :sid AND certificate_type = 'participation'
                """,
                {"eid": str(event["id"]), "sid": str(item["id"])}
            )
            if existing:
                generated.append(dict(existing))
                reused += 1
                continue
            generated.append(await CertificateService._create_certificate(
                dict(item), event, "participation", admin["id"], registration_order_id=order_id
            ))

        await update_row("registration_orders", order_id, {"certificate_generated": True, "status": "COMPLETED"})
        logger.info("[CERT] Registration order %s: %d certificates (%d reused)",
                    order["order_number"], len(generated), reused)
        return {
            "message": f"{len(generated) - reused} certificates generated",
            "generated": len(generated) - reused,
            "reused": reused,
            "certificates": serialize_rows(generated, exclude=("certificate_url",)),
        }

    @staticmethod
    async def get_by_uid(unique_id: str) -> dict:
        row = await database.fetch_one("SELECT * FROM certificates WHERE unique_id = :uid", {"uid": unique_id})
        if not row:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Certificate not found")
        return dict(row)

    @staticmethod
    async def verify(unique_id: str) -> dict:
        certificate = await CertificateService.get_by_uid(unique_id)
        return {
            "valid": True,
            "certificate": serialize_row(certificate, exclude=("certificate_url", "issued_by", "registration_order_id")),
        }

    @staticmethod
    async def download(unique_id: str) -> Tuple[bytes, str]:
        """PDF bytes and a download filename"""
        certificate = await CertificateService.get_by_uid(unique_id)
        pdf_bytes = None
        if certificate.get("certificate_url"):
            try:
                pdf_bytes = await storage_service.read_bytes(certificate["certificate_url"])
            except HTTPException:
                logger.warning("[CERT] Stored PDF for %s missing, re-rendering", unique_id)
        if pdf_bytes is None:
            pdf_bytes = CertificateService.render_pdf(certificate)
        return pdf_bytes, f"{unique_id}.pdf"

    @staticmethod
    async def list_for_student(current_user: dict) -> dict:
        rows = await database.fetch_all(
            """
            SELECT c.*, e.unique_id AS event_uid, e.start_date
            FROM certificates c
            JOIN events e ON e.id = c.event_id
            WHERE c.student_id = :sid
            ORDER BY c.issue_date DESC
            """,
            {"sid": str(current_user["profile"]["id"])}
        )
        return {"certificates": serialize_rows(rows, exclude=("certificate_url", "issued_by"))}

    @staticmethod
    async def list_for_event(current_user: dict, event_id: str) -> dict:
        event = await event_service.get_event_row(event_id)
        await event_service.check_event_permission(current_user, event, "certificate_management")
        rows = await database.fetch_all(
            """
            SELECT c.*, u.unique_id AS student_uid
            FROM certificates c
            JOIN students s ON s.id = c.student_id
            JOIN users u ON u.id = s.user_id
            WHERE c.event_id = :eid
            ORDER BY c.issue_date DESC
            """,
            {"eid": str(event["id"])}
        )
        return {
            "event": {"id": str(event["id"]), "unique_id": event["unique_id"], "name": event["name"]},
            "certificates": serialize_rows(rows, exclude=("certificate_url",)),
            "total": len(rows),
        }

    @staticmethod
    async def eligible_students(current_user: dict, event_id: str) -> dict:
        """Registered students with their certificate status and the remaining allowance"""
        event = await event_service.get_event_row(event_id)
        await event_service.check_event_permission(current_user, event, "certificate_management")

        rows = await database.fetch_all(
            """
            SELECT s.id, s.name, u.unique_id,
                   (SELECT COUNT(*) FROM certificates c
                     WHERE c.event_id = r.event_id AND c.student_id = s.id) AS certificate_count
            FROM event_registrations r
            JOIN students s ON s.id = r.student_id
            JOIN users u ON u.id = s.user_id
            WHERE r.event_id = :eid
            ORDER BY s.name ASC
            """,
            {"eid": str(event["id"])}
        )
        students = []
        for row in rows:
            student = serialize_row(row)
            student["has_certificate"] = int(row["certificate_count"] or 0) > 0
            students.append(student)

        remaining = None
        if current_user["role"] == "COACH" and current_user.get("profile"):
            allowance = await order_service.paid_certificate_allowance(event["id"], current_user["profile"]["id"])
            issued = await database.fetch_val(
                "SELECT COUNT(*) FROM certificates WHERE event_id = :eid AND issued_by = :uid",
                {"eid": str(event["id"]), "uid": current_user["id"]}
            )
            remaining = max(allowance - int(issued or 0), 0)

        return {"students": students, "remaining_certificates": remaining}


# Create singleton instance
certificate_service = CertificateService()
