"""Streamlit dashboard for fleet operations, mission planning and monitoring."""
import json
import sys
from pathlib import Path

# Make the survey_fleet package importable when run with `streamlit run`
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import pandas as pd
import streamlit as st
from streamlit_folium import st_folium

from survey_fleet.config import get_settings
from survey_fleet.domain.constraints import default_no_fly_zones
from survey_fleet.domain.drone import DroneStatus
from survey_fleet.domain.mission import FlightPattern, MissionType
from survey_fleet.domain.mission_status import ALLOWED_TRANSITIONS, MissionStatus
from survey_fleet.errors import FleetError
from survey_fleet.logging_config import setup_logging
from survey_fleet.persistence.db import get_session_factory
from survey_fleet.persistence.seed import seed_database
from survey_fleet.planning.flight_patterns import path_length_km, survey_area_km2
from survey_fleet.services.analytics_service import organization_stats
from survey_fleet.services.fleet_service import FleetService
from survey_fleet.services.mission_service import MissionService
from survey_fleet.services.organization_service import OrganizationService
from survey_fleet.services.report_service import ReportService
from survey_fleet.simulation.progress_simulator import ProgressSimulator
from survey_fleet.visualization.map_renderer import MapRenderer

settings = get_settings()

st.set_page_config(page_title="Survey Fleet", layout="wide")


@st.cache_resource
def _bootstrap():
    setup_logging(settings.log_level)
    return get_session_factory()


@st.cache_resource
def get_simulator() -> ProgressSimulator:
    return ProgressSimulator(settings=settings)


SessionFactory = _bootstrap()
db = SessionFactory()

if "last_tick" not in st.session_state:
    st.session_state.last_tick = None

st.title("🚁 Survey Fleet")

# Sidebar: organization context and navigation
with st.sidebar:
    st.header("Organization")
    organizations = OrganizationService(db).list_organizations()
    if not organizations:
        st.info("No organizations yet.")
        if st.button("Seed demo data", type="primary", use_container_width=True):
            seed_database(db)
            st.rerun()
        st.stop()

    names = {org.id: org.name for org in organizations}
    ids = list(names)
    default_index = ids.index(settings.organization_id) if settings.organization_id in ids else 0
    organization_id = st.selectbox(
        "Organization", ids, index=default_index, format_func=lambda org_id: names[org_id])

    st.divider()
    page = st.radio("Page", ["Dashboard", "Fleet", "Missions", "Monitoring", "Reports"])

    st.divider()
    if st.button("▶️ Simulate progress", use_container_width=True):
        st.session_state.last_tick = get_simulator().tick(organization_id)
    tick = st.session_state.last_tick
    if tick is not None:
        if tick.skipped:
            st.caption("Previous tick still running; skipped.")
        else:
            st.caption(
                f"Advanced {tick.missions_advanced} missions, "
                f"completed {len(tick.missions_completed)}, aborted {len(tick.missions_aborted)}")
            for error in tick.errors:
                st.error(error)


fleet = FleetService(db)
missions = MissionService(db)
reports = ReportService(db)
renderer = MapRenderer()


def show_error(e: FleetError):
    st.error(f"❌ {e}")


# ---------- Dashboard ----------
if page == "Dashboard":
    stats = organization_stats(db, organization_id)
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Drones", stats["total_drones"])
    col2.metric("Active missions", stats["active_missions"])
    col3.metric("Completed missions", stats["completed_missions"])
    col4.metric("Success rate", f"{stats['success_rate']:.1f}%")

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Flight time", f"{stats['total_flight_time']:.0f} min")
    col2.metric("Avg mission", f"{stats['average_mission_duration']:.1f} min")
    col3.metric("Avg battery", f"{stats['average_battery_level']:.0f}%")
    col4.metric("Needs maintenance", stats["drones_needing_maintenance"])

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Missions by type")
        if stats["missions_by_type"]:
            st.bar_chart(pd.Series(stats["missions_by_type"], name="missions"))
    with col2:
        st.subheader("Drones by status")
        if stats["drones_by_status"]:
            st.bar_chart(pd.Series(stats["drones_by_status"], name="drones"))

# ---------- Fleet ----------
elif page == "Fleet":
    drones = fleet.list_drones(organization_id)
    st.subheader("Fleet")
    if drones:
        st.dataframe(pd.DataFrame([{
            "Name": d.name,
            "Model": d.model,
            "Serial": d.serial_number,
            "Status": d.status.value,
            "Battery %": round(d.battery_level, 1),
            "Max flight (min)": d.max_flight_time,
            "Capabilities": ", ".join(d.capabilities),
        } for d in drones]), use_container_width=True, hide_index=True)
        st_folium(renderer.render_fleet(drones, default_no_fly_zones()), width=1200, height=450)

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Add drone")
        with st.form("add_drone"):
            name = st.text_input("Name")
            model = st.text_input("Model")
            serial_number = st.text_input("Serial number")
            battery_level = st.slider("Battery level", 0, 100, 100)
            max_flight_time = st.number_input("Max flight time (min)", min_value=1.0, value=30.0)
            capabilities = st.multiselect(
                "Capabilities", ["mapping", "inspection", "surveillance", "photography", "thermal_imaging"])
            if st.form_submit_button("Add drone"):
                try:
                    drone = fleet.register_drone(organization_id, {
                        "name": name,
                        "model": model,
                        "serial_number": serial_number,
                        "battery_level": battery_level,
                        "max_flight_time": max_flight_time,
                        "capabilities": capabilities,
                    })
                    st.success(f"✅ Drone {drone.name} added")
                    st.rerun()
                except FleetError as e:
                    show_error(e)

    with col2:
        st.subheader("Change status")
        grounded = [d for d in drones if d.status != DroneStatus.IN_MISSION]
        if grounded:
            with st.form("drone_status"):
                drone_id = st.selectbox(
                    "Drone", [d.id for d in grounded],
                    format_func=lambda i: next(d.name for d in grounded if d.id == i))
                status = st.selectbox("Status", ["available", "maintenance", "charging"])
                recharge = st.checkbox("Battery recharged to 100%")
                if st.form_submit_button("Update"):
                    try:
                        if recharge and status == "available":
                            fleet.recharge(drone_id, 100.0, organization_id)
                        else:
                            fleet.set_status(drone_id, status, organization_id)
                        st.rerun()
                    except FleetError as e:
                        show_error(e)

# ---------- Missions ----------
elif page == "Missions":
    st.subheader("Plan mission")
    available = fleet.list_available(organization_id)
    sites = OrganizationService(db).list_sites(organization_id)
    if not available:
        st.info("No available drones.")
    else:
        with st.form("plan_mission"):
            name = st.text_input("Mission name")
            drone_id = st.selectbox(
                "Drone", [d.id for d in available],
                format_func=lambda i: next(f"{d.name} ({d.battery_level:.0f}%)" for d in available if d.id == i))
            col1, col2 = st.columns(2)
            mission_type = col1.selectbox("Type", [t.value for t in MissionType])
            flight_pattern = col2.selectbox("Pattern", [p.value for p in FlightPattern])
            site_id = st.selectbox(
                "Site", [None] + [s.id for s in sites],
                format_func=lambda i: "Default airspace" if i is None else next(s.name for s in sites if s.id == i))
            col1, col2, col3 = st.columns(3)
            altitude = col1.number_input("Altitude (m)", min_value=10.0, max_value=400.0, value=100.0)
            speed = col2.number_input("Speed (m/s)", min_value=1.0, max_value=20.0, value=5.0)
            estimated_duration = col3.number_input("Estimated duration (min)", min_value=1.0, value=30.0)
            flight_path_text = st.text_area(
                "Flight path (optional, one 'lat, lng' per line)",
                help="Leave empty to generate the path from the pattern")
            if st.form_submit_button("Create mission", type="primary"):
                try:
                    mission = missions.create_mission(organization_id, {
                        "name": name,
                        "drone_id": drone_id,
                        "mission_type": mission_type,
                        "flight_pattern": flight_pattern,
                        "site_id": site_id,
                        "parameters": {"altitude": altitude, "speed": speed},
                        "flight_path_text": flight_path_text,
                        "estimated_duration": estimated_duration,
                    })
                    checks = mission.safety_checks
                    st.success(f"✅ Mission {mission.name} planned ({len(mission.flight_path)} waypoints, "
                               f"{path_length_km(mission.flight_path):.2f} km)")
                    if not checks.all_clear:
                        st.warning(
                            f"⚠️ Safety: no-fly zones clear={checks.no_fly_zone_clear}, "
                            f"weather ok={checks.weather_acceptable}, battery ok={checks.battery_sufficient}")
                except FleetError as e:
                    show_error(e)

    st.subheader("Missions")
    for data in missions.list_missions(organization_id):
        status = MissionStatus(data["status"])
        drone_name = data["drone"]["name"] if data["drone"] else "unknown drone"
        with st.expander(f"{data['name']} · {drone_name} · {status.value} · {data['progress']:.0f}%"):
            st.progress(min(int(data["progress"]), 100))
            col1, col2, col3 = st.columns(3)
            col1.write(f"Type: {data['mission_type']}")
            col2.write(f"Pattern: {data['flight_pattern']}")
            col3.write(f"Elapsed: {data['elapsed_time']:.0f}/{data['estimated_duration']:.0f} min")
            if data.get("survey_area"):
                st.write(f"Survey area: {survey_area_km2(data['survey_area']):.3f} km²")
            if st.checkbox("Show map", key=f"map-{data['id']}"):
                mission = missions.get_mission(data["id"], organization_id)
                drone = fleet.get_drone(mission.drone_id) if data["drone"] else None
                st_folium(renderer.render_mission(mission, drone, default_no_fly_zones()),
                          width=1100, height=450, key=f"folium-{data['id']}")
            targets = sorted(ALLOWED_TRANSITIONS[status], key=lambda s: s.value)
            buttons = st.columns(max(len(targets), 1))
            for col, target in zip(buttons, targets):
                if col.button(target.value, key=f"{data['id']}-{target.value}"):
                    try:
                        missions.transition(data["id"], target, organization_id)
                        st.rerun()
                    except FleetError as e:
                        show_error(e)

# ---------- Monitoring ----------
elif page == "Monitoring":
    active = missions.list_active_missions(organization_id)
    drones = {d.id: d for d in fleet.list_drones(organization_id)}
    st.subheader(f"Active missions ({len(active)})")
    if active:
        st.dataframe(pd.DataFrame([{
            "Mission": m.name,
            "Drone": drones[m.drone_id].name if m.drone_id in drones else m.drone_id,
            "Status": m.status.value,
            "Progress %": round(m.progress, 1),
            "Battery %": round(drones[m.drone_id].battery_level, 1) if m.drone_id in drones else None,
            "Elapsed (min)": m.elapsed_time,
        } for m in active]), use_container_width=True, hide_index=True)
    st_folium(renderer.render_monitoring(active, drones, default_no_fly_zones()), width=1200, height=600)

# ---------- Reports ----------
elif page == "Reports":
    report_rows = reports.list_reports(organization_id)
    totals = ReportService.totals(report_rows)
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Reports", totals["total_reports"])
    col2.metric("Images", totals["total_images"])
    col3.metric("Area covered", f"{totals['total_area']:.2f} km²")
    col4.metric("Distance", f"{totals['total_distance']:.2f} km")

    for row in report_rows:
        summary = row["summary"]
        with st.expander(f"{row['mission']['name']} · {row['drone']['name']} · {row['created_at'][:16]}"):
            col1, col2, col3 = st.columns(3)
            col1.write(f"Distance: {summary['total_distance']} km")
            col1.write(f"Area: {summary['area_covered']} km²")
            col2.write(f"Images: {summary['images_captured']}")
            col2.write(f"Duration: {summary['flight_duration']:.0f} min")
            col3.write(f"Battery used: {summary['battery_consumed']}%")
            col3.write(f"Avg altitude: {row['statistics']['average_altitude']} m")
            st.download_button(
                "📥 Download JSON",
                data=json.dumps(row, indent=2, ensure_ascii=False),
                file_name=f"survey_report_{row['id']}.json",
                mime="application/json",
                key=f"download-{row['id']}",
            )

db.close()
