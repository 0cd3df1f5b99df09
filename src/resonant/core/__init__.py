from resonant.core.color import Color3, hsv_to_rgb, hsv_to_rgb_array
