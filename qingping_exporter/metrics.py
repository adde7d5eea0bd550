"""
Prometheus metric surface for air monitor devices.

Pure state container: every setter overwrites the last published value for a
device and never performs I/O.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Gauge, Histogram, REGISTRY

from .data_models import Device, Reading

DEVICE_LABELS = ["device_mac"]
DEVICE_INFO_LABELS = ["device_name", "device_mac", "status", "product_name", "product_code", "product_id"]


class AirMonitorMetrics:
    """Gauges and the sync-duration histogram, labelled by device MAC"""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        registry = registry if registry is not None else REGISTRY
        self.registry = registry

        self.temperature = Gauge("air_monitor_temperature", "Temperature in degrees Celsius",
                                 DEVICE_LABELS, registry=registry)
        self.humidity = Gauge("air_monitor_humidity", "Humidity percentage",
                              DEVICE_LABELS, registry=registry)
        self.pm25 = Gauge("air_monitor_pm25", "PM2.5 concentration in µg/m³",
                          DEVICE_LABELS, registry=registry)
        self.pm10 = Gauge("air_monitor_pm10", "PM10 concentration in µg/m³",
                          DEVICE_LABELS, registry=registry)
        self.co2 = Gauge("air_monitor_co2", "CO2 concentration in ppm",
                         DEVICE_LABELS, registry=registry)
        self.battery = Gauge("air_monitor_battery", "Battery level percentage",
                             DEVICE_LABELS, registry=registry)
        self.device_info = Gauge("air_monitor_device_info", "Device information",
                                 DEVICE_INFO_LABELS, registry=registry)
        self.last_data_timestamp = Gauge("device_last_data_timestamp", "Last data timestamp",
                                         DEVICE_LABELS, registry=registry)
        self.sync_duration = Histogram("air_monitor_sync_duration_seconds",
                                       "Duration of the sync request", ["phase"],
                                       registry=registry)

    def set_temperature(self, mac: str, value: float):
        self.temperature.labels(device_mac=mac).set(value)

    def set_humidity(self, mac: str, value: float):
        self.humidity.labels(device_mac=mac).set(value)

    def set_pm25(self, mac: str, value: float):
        self.pm25.labels(device_mac=mac).set(value)

    def set_pm10(self, mac: str, value: float):
        self.pm10.labels(device_mac=mac).set(value)

    def set_co2(self, mac: str, value: float):
        self.co2.labels(device_mac=mac).set(value)

    def set_battery(self, mac: str, value: float):
        self.battery.labels(device_mac=mac).set(value)

    def set_last_data_timestamp(self, mac: str, timestamp: float):
        self.last_data_timestamp.labels(device_mac=mac).set(timestamp)

    def set_device_info(self, device: Device):
        """Publish the identity series of a device with value 1"""
        self.device_info.labels(
            device_name=device.name,
            device_mac=device.mac,
            status=device.status_label,
            product_name=device.product_name,
            product_code=device.product_code,
            product_id=str(device.product_id),
        ).set(1)

    def mark_no_data(self, mac: str):
        """Signal an empty polling window.

        Only the last-data timestamp drops to 0; the reading gauges keep
        their previous values so "no recent data" stays distinguishable
        from a reading of zero.
        """
        self.set_last_data_timestamp(mac, 0)

    def publish_reading(self, mac: str, reading: Reading):
        """Publish every field present in the reading"""
        setters = (
            (reading.timestamp, self.set_last_data_timestamp),
            (reading.temperature, self.set_temperature),
            (reading.humidity, self.set_humidity),
            (reading.co2, self.set_co2),
            (reading.pm25, self.set_pm25),
            (reading.pm10, self.set_pm10),
            (reading.battery, self.set_battery),
        )
        for value, setter in setters:
            if value is not None:
                setter(mac, value)

    def observe_phase(self, phase: str, seconds: float):
        """Record the duration of a completed sync phase"""
        self.sync_duration.labels(phase=phase).observe(seconds)
