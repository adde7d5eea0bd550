"""
Unit tests for AirMonitorMetrics.
"""
from qingping_exporter.data_models import Device, Reading

MAC = "34CE00000000"


def sample(registry, name, **labels):
    return registry.get_sample_value(name, labels)


class TestAirMonitorMetrics:
    """Test cases for the metric surface."""

    def test_publish_reading(self, metrics, registry):
        metrics.publish_reading(MAC, Reading(timestamp=1726750800, battery=44, temperature=26.1,
                                             humidity=56, co2=452, pm25=11, pm10=13))

        assert sample(registry, "air_monitor_temperature", device_mac=MAC) == 26.1
        assert sample(registry, "air_monitor_humidity", device_mac=MAC) == 56
        assert sample(registry, "air_monitor_co2", device_mac=MAC) == 452
        assert sample(registry, "air_monitor_pm25", device_mac=MAC) == 11
        assert sample(registry, "air_monitor_pm10", device_mac=MAC) == 13
        assert sample(registry, "air_monitor_battery", device_mac=MAC) == 44
        assert sample(registry, "device_last_data_timestamp", device_mac=MAC) == 1726750800

    def test_last_write_wins(self, metrics, registry):
        metrics.set_temperature(MAC, 25.0)
        metrics.set_temperature(MAC, 19.5)
        metrics.set_temperature("OTHER", 30.0)

        assert sample(registry, "air_monitor_temperature", device_mac=MAC) == 19.5
        assert sample(registry, "air_monitor_temperature", device_mac="OTHER") == 30.0

    def test_missing_fields_leave_gauges_untouched(self, metrics, registry):
        metrics.publish_reading(MAC, Reading(timestamp=100, temperature=20, humidity=40))
        metrics.publish_reading(MAC, Reading(timestamp=200, temperature=21))

        assert sample(registry, "air_monitor_temperature", device_mac=MAC) == 21
        assert sample(registry, "air_monitor_humidity", device_mac=MAC) == 40
        assert sample(registry, "air_monitor_co2", device_mac=MAC) is None

    def test_mark_no_data(self, metrics, registry):
        metrics.publish_reading(MAC, Reading(timestamp=1726750800, temperature=26.1, co2=452))

        metrics.mark_no_data(MAC)

        assert sample(registry, "device_last_data_timestamp", device_mac=MAC) == 0
        assert sample(registry, "air_monitor_temperature", device_mac=MAC) == 26.1
        assert sample(registry, "air_monitor_co2", device_mac=MAC) == 452

    def test_device_info(self, metrics, registry):
        device = Device(mac=MAC, name="Living Room", product_code="CGDN1",
                        product_name="Qingping Air Monitor Lite", product_id=1201, online=False)

        metrics.set_device_info(device)

        assert sample(
            registry, "air_monitor_device_info",
            device_name="Living Room",
            device_mac=MAC,
            status="offline",
            product_name="Qingping Air Monitor Lite",
            product_code="CGDN1",
            product_id="1201",
        ) == 1

    def test_observe_phase(self, metrics, registry):
        metrics.observe_phase("device_list", 0.25)
        metrics.observe_phase("device_list", 0.5)

        assert sample(registry, "air_monitor_sync_duration_seconds_count", phase="device_list") == 2
        assert sample(registry, "air_monitor_sync_duration_seconds_sum", phase="device_list") == 0.75
        assert sample(registry, "air_monitor_sync_duration_seconds_count", phase="sync") is None
