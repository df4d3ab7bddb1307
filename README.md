# oceansurf

CPU-side data for rendering an animated ocean surface under a daylight sky.

## What is in it

- `oceansurf.tessendorf.WSTessendorf`: statistical wave model after Tessendorf,
  *Simulating Ocean Water*. It draws a random height field from the Phillips
  spectrum, animates it with the deep-water dispersion relation and uses
  inverse FFTs to give per-point displacements and slope data for a square
  tile whose size is a power of two. Call `prepare()` after changing
  parameters, then `compute_waves(t)`.
- `oceansurf.spectrum`: `SpectrumParams` (wind and Phillips spectrum
  parameters, `phillips`, `base_wave_height`), the dispersion relations
  `dispersion_deep`, `dispersion_transitional`, `dispersion_small`,
  `quantized_dispersion`, plus `wave_height_ft` and `wave_vectors`.
- `oceansurf.sky.SkyPreetham`: Preetham analytic daylight model. It keeps its
  results in a `SkyProps` dataclass: Perez coefficients `A`–`E`, zenith
  luminance (Yxy) and `zero_theta_sun`.
- `oceansurf.skymodel.SkyModel`: holds a `SkyPreetham` and the `SkyParams`
  (sun colour, intensity, sky properties); `set_sun` moves the sun and
  `prepare_render` gathers per-frame `SkyUniforms`.
  `sun_direction_from_angles` turns inclination and azimuth into a direction.
- `oceansurf.optics`: Jerlov water-type absorption tables, scattering
  coefficients at 514 nm, and `scattering_coefficient`,
  `backscattering_coefficient`, `pigment_backscattering_coefficient`.
  `LabeledValues` is the table type: values with display labels.
- `oceansurf.camera`: `Camera`, a first-person camera with view and
  perspective matrices and keyboard (`Key`) and mouse handlers, and the
  matrix helpers `look_at`, `perspective` and `orthographic`.
- `oceansurf.grid`: `grid_vertices` and `grid_indices` for a flat grid mesh,
  size helpers `total_vertex_count`, `total_index_count`, `align_size`, and a
  `Mesh` container that writes its vertices and indices into a writable byte
  buffer only when they have changed.
- `oceansurf.watersurface.WaterSurface`: ties the wave model, the grid mesh
  and the uniform data together. It lays them out in one staging buffer
  (`| vertices | indices | padding | displacements | normals |`) and fills a
  displacement and a normal map per resolution. `WaterSurfaceParams` holds the
  lighting and water properties.

## Install

```
pip install .
pip install .[test]   # with pytest
```

## Examples

```python
import numpy as np
from oceansurf.tessendorf import WSTessendorf

model = WSTessendorf(tile_size=64, tile_length=1000.0, rng=np.random.default_rng(1))
model.prepare()
amplitude = model.compute_waves(1.5)
# model.displacements: (64*64, 4) float32 rows of (dx, height / amplitude, dz, 1)
# model.normals:       (64*64, 4) float32 rows of (slope_x, slope_z, d(dx)/dx, d(dz)/dz)
```

```python
from oceansurf.sky import SkyPreetham

sky = SkyPreetham((0.0, 1.0, 0.4), turbidity=2.5)
print(sky.props.zenith_lum)
```

```python
import numpy as np
from oceansurf.camera import Camera, Key
from oceansurf.skymodel import SkyModel
from oceansurf.watersurface import WaterSurface

camera = Camera(16 / 9, position=(0.0, 60.0, 0.0))
camera.on_key_pressed(Key.FORWARD, 1)
camera.update(0.016)

sky = SkyModel((0.0, 1.0, 0.4))
surface = WaterSurface(rng=np.random.default_rng(7))
surface.prepare()
surface.update(0.016)
surface.prepare_render(camera.view_matrix, camera.proj_matrix, camera.position, sky.params)
data = surface.staging_bytes()
```

## What it does not do

The package only computes data. It opens no window, draws nothing, has no
GUI and does not talk to a graphics device. The shader file names it lists
(`SHADER_PATHS`) are not part of the package, and there is no command to run.

## Tests

```
pytest
```