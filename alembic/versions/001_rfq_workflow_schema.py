"""RFQ workflow schema

Revision ID: 001
Revises: None
Create Date: 2026-10-17

Creates: vessels, requisitions, requisition_items, vendors, vendor_service_areas,
         vendor_port_capabilities, rfqs, rfq_vendors, quotes, quote_line_items,
         audit_logs
Enums: requisitionstatus, rfqstatus, quotestatus, notificationstatus, auditaction
"""

from collections.abc import Sequence

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto";')

    # ── 1. Enum types ─────────────────────────────────────────────────────
    op.execute("""
        CREATE TYPE requisitionstatus AS ENUM (
            'DRAFT', 'PENDING_APPROVAL', 'APPROVED', 'REJECTED',
            'CONVERTED_TO_RFQ', 'CANCELLED'
        );
    """)
    op.execute("""
        CREATE TYPE rfqstatus AS ENUM (
            'DRAFT', 'SENT', 'RESPONSES_RECEIVED', 'EVALUATED',
            'AWARDED', 'CANCELLED'
        );
    """)
    op.execute("""
        CREATE TYPE quotestatus AS ENUM (
            'SUBMITTED', 'UNDER_REVIEW', 'ACCEPTED', 'REJECTED', 'EXPIRED'
        );
    """)
    op.execute("CREATE TYPE notificationstatus AS ENUM ('PENDING', 'SENT', 'FAILED');")
    op.execute("CREATE TYPE auditaction AS ENUM ('CREATE', 'UPDATE', 'DELETE');")

    # ── 2. Fleet and requisitions ─────────────────────────────────────────
    op.execute("""
        CREATE TABLE vessels (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            imo_number VARCHAR(7) NOT NULL,
            name VARCHAR(255) NOT NULL,
            flag_state VARCHAR(3),
            is_active BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_vessels_imo_number UNIQUE (imo_number),
            CONSTRAINT ck_vessels_imo_format CHECK (imo_number ~ '^[0-9]{7}$')
        );
    """)

    op.execute("""
        CREATE TABLE requisitions (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            requisition_number VARCHAR(30) NOT NULL,
            vessel_id UUID NOT NULL REFERENCES vessels(id) ON DELETE RESTRICT,
            status requisitionstatus NOT NULL DEFAULT 'DRAFT',
            currency VARCHAR(3) NOT NULL DEFAULT 'USD',
            delivery_location VARCHAR(255),
            delivery_date TIMESTAMPTZ,
            justification TEXT,
            requested_by UUID,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_requisitions_requisition_number UNIQUE (requisition_number)
        );
    """)
    op.execute("CREATE INDEX ix_requisitions_vessel_id ON requisitions (vessel_id);")
    op.execute("CREATE INDEX ix_requisitions_status ON requisitions (status);")

    op.execute("""
        CREATE TABLE requisition_items (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            requisition_id UUID NOT NULL REFERENCES requisitions(id) ON DELETE CASCADE,
            impa_code VARCHAR(10),
            description VARCHAR(500) NOT NULL,
            quantity NUMERIC(12, 3) NOT NULL,
            unit_of_measure VARCHAR(20) NOT NULL,
            specifications TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)
    op.execute(
        "CREATE INDEX ix_requisition_items_requisition_id ON requisition_items (requisition_id);"
    )

    # ── 3. Vendor registry ────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE vendors (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name VARCHAR(255) NOT NULL,
            code VARCHAR(30) NOT NULL,
            email VARCHAR(255),
            contact_email VARCHAR(255),
            contact_person_name VARCHAR(255),
            is_active BOOLEAN NOT NULL DEFAULT true,
            is_approved BOOLEAN NOT NULL DEFAULT false,
            overall_score NUMERIC(4, 2),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_vendors_code UNIQUE (code)
        );
    """)
    op.execute("""
        CREATE INDEX ix_vendors_eligible ON vendors (overall_score)
        WHERE is_active AND is_approved;
    """)

    op.execute("""
        CREATE TABLE vendor_service_areas (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            vendor_id UUID NOT NULL REFERENCES vendors(id) ON DELETE CASCADE,
            country VARCHAR(100) NOT NULL,
            region VARCHAR(100),
            ports VARCHAR(10)[] NOT NULL DEFAULT '{}',
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)
    op.execute("CREATE INDEX ix_vendor_service_areas_vendor_id ON vendor_service_areas (vendor_id);")
    op.execute("CREATE INDEX ix_vendor_service_areas_country ON vendor_service_areas (country);")
    op.execute(
        "CREATE INDEX ix_vendor_service_areas_ports ON vendor_service_areas USING gin (ports);"
    )

    op.execute("""
        CREATE TABLE vendor_port_capabilities (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            vendor_id UUID NOT NULL REFERENCES vendors(id) ON DELETE CASCADE,
            port_code VARCHAR(10) NOT NULL,
            capabilities VARCHAR(50)[] NOT NULL DEFAULT '{}',
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)
    op.execute(
        "CREATE INDEX ix_vendor_port_capabilities_vendor_id ON vendor_port_capabilities (vendor_id);"
    )
    op.execute("""
        CREATE INDEX ix_vendor_port_capabilities_capabilities
        ON vendor_port_capabilities USING gin (capabilities);
    """)

    # ── 4. RFQs ───────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE rfqs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            rfq_number VARCHAR(20) NOT NULL,
            requisition_id UUID NOT NULL REFERENCES requisitions(id) ON DELETE RESTRICT,
            title VARCHAR(255) NOT NULL,
            description TEXT,
            status rfqstatus NOT NULL DEFAULT 'DRAFT',
            currency VARCHAR(3) NOT NULL DEFAULT 'USD',
            delivery_location VARCHAR(255),
            delivery_date TIMESTAMPTZ,
            response_deadline TIMESTAMPTZ NOT NULL,
            issue_date TIMESTAMPTZ NOT NULL,
            cancelled_at TIMESTAMPTZ,
            cancellation_reason TEXT,
            created_by UUID,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_rfqs_rfq_number UNIQUE (rfq_number)
        );
    """)
    op.execute("CREATE INDEX ix_rfqs_requisition_id ON rfqs (requisition_id);")
    op.execute("CREATE INDEX ix_rfqs_status ON rfqs (status);")
    op.execute("CREATE INDEX ix_rfqs_created_at ON rfqs (created_at);")

    op.execute("""
        CREATE TABLE rfq_vendors (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            rfq_id UUID NOT NULL REFERENCES rfqs(id) ON DELETE CASCADE,
            vendor_id UUID NOT NULL REFERENCES vendors(id) ON DELETE RESTRICT,
            sent_at TIMESTAMPTZ NOT NULL,
            notification_status notificationstatus NOT NULL DEFAULT 'PENDING',
            notification_attempts INTEGER NOT NULL DEFAULT 0,
            notified_at TIMESTAMPTZ,
            last_notification_error TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_rfq_vendors_rfq_vendor UNIQUE (rfq_id, vendor_id)
        );
    """)
    op.execute("CREATE INDEX ix_rfq_vendors_vendor_id ON rfq_vendors (vendor_id);")
    op.execute("""
        CREATE INDEX ix_rfq_vendors_failed ON rfq_vendors (rfq_id)
        WHERE notification_status = 'FAILED';
    """)

    # ── 5. Quotes (read-only from the RFQ workflow) ───────────────────────
    op.execute("""
        CREATE TABLE quotes (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            rfq_id UUID NOT NULL REFERENCES rfqs(id) ON DELETE CASCADE,
            vendor_id UUID NOT NULL REFERENCES vendors(id) ON DELETE CASCADE,
            quote_number VARCHAR(30) NOT NULL,
            status quotestatus NOT NULL DEFAULT 'SUBMITTED',
            total_amount NUMERIC(15, 2),
            currency VARCHAR(3) NOT NULL DEFAULT 'USD',
            valid_until TIMESTAMPTZ,
            delivery_days INTEGER,
            payment_terms VARCHAR(255),
            notes TEXT,
            submitted_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_quotes_quote_number UNIQUE (quote_number),
            CONSTRAINT ck_quotes_total_amount_non_negative
                CHECK (total_amount IS NULL OR total_amount >= 0)
        );
    """)
    op.execute("CREATE INDEX ix_quotes_rfq_id ON quotes (rfq_id);")
    op.execute("CREATE INDEX ix_quotes_vendor_id ON quotes (vendor_id);")

    op.execute("""
        CREATE TABLE quote_line_items (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            quote_id UUID NOT NULL REFERENCES quotes(id) ON DELETE CASCADE,
            requisition_item_id UUID REFERENCES requisition_items(id) ON DELETE SET NULL,
            description VARCHAR(500) NOT NULL,
            unit_price NUMERIC(15, 4) NOT NULL,
            quantity NUMERIC(12, 3) NOT NULL,
            total_price NUMERIC(15, 2) NOT NULL,
            lead_time_days INTEGER,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT ck_quote_line_items_unit_price_non_negative CHECK (unit_price >= 0),
            CONSTRAINT ck_quote_line_items_quantity_positive CHECK (quantity > 0)
        );
    """)
    op.execute("CREATE INDEX ix_quote_line_items_quote_id ON quote_line_items (quote_id);")

    # ── 6. Audit trail ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE audit_logs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID,
            action auditaction NOT NULL,
            resource VARCHAR(100) NOT NULL,
            resource_id VARCHAR(255),
            old_values JSONB,
            new_values JSONB,
            metadata_extra JSONB NOT NULL DEFAULT '{}',
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)
    op.execute("CREATE INDEX ix_audit_logs_resource ON audit_logs (resource, resource_id);")
    op.execute("CREATE INDEX ix_audit_logs_created_at ON audit_logs (created_at);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS audit_logs CASCADE;")
    op.execute("DROP TABLE IF EXISTS quote_line_items CASCADE;")
    op.execute("DROP TABLE IF EXISTS quotes CASCADE;")
    op.execute("DROP TABLE IF EXISTS rfq_vendors CASCADE;")
    op.execute("DROP TABLE IF EXISTS rfqs CASCADE;")
    op.execute("DROP TABLE IF EXISTS vendor_port_capabilities CASCADE;")
    op.execute("DROP TABLE IF EXISTS vendor_service_areas CASCADE;")
    op.execute("DROP TABLE IF EXISTS vendors CASCADE;")
    op.execute("DROP TABLE IF EXISTS requisition_items CASCADE;")
    op.execute("DROP TABLE IF EXISTS requisitions CASCADE;")
    op.execute("DROP TABLE IF EXISTS vessels CASCADE;")

    op.execute("DROP TYPE IF EXISTS auditaction;")
    op.execute("DROP TYPE IF EXISTS notificationstatus;")
    op.execute("DROP TYPE IF EXISTS quotestatus;")
    op.execute("DROP TYPE IF EXISTS rfqstatus;")
    op.execute("DROP TYPE IF EXISTS requisitionstatus;")
